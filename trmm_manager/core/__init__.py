"""Authenticated-request core shared by every screen."""

from .classifier import RequestCancelled, classify, classify_exception, extract_message
from .credentials import (
    CredentialResolver,
    FileSecretStore,
    MemorySecretStore,
    NotFound,
    Secret,
    is_missing,
)
from .outcome import (
    AuthFailure,
    Cancelled,
    InvalidURL,
    PermissionFailure,
    RequestOutcome,
    ServerError,
    Success,
    TransportFailure,
    ValidationFailure,
)
from .request_builder import ApiRequest, build
from .transport import ApiClient, CancelToken, DecodeError

__all__ = [
    "ApiClient",
    "ApiRequest",
    "AuthFailure",
    "CancelToken",
    "Cancelled",
    "CredentialResolver",
    "DecodeError",
    "FileSecretStore",
    "InvalidURL",
    "MemorySecretStore",
    "NotFound",
    "PermissionFailure",
    "RequestCancelled",
    "RequestOutcome",
    "Secret",
    "ServerError",
    "Success",
    "TransportFailure",
    "ValidationFailure",
    "build",
    "classify",
    "classify_exception",
    "extract_message",
    "is_missing",
]
