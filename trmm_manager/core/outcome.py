"""Result values for one authenticated round trip.

Every screen's error handling is a switch over `RequestOutcome`. Failures are
values, not exceptions, so callers can branch without try/except ladders.
"""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Success:
    status_code: int
    body: bytes = field(default=b"", repr=False)

    @property
    def has_body(self) -> bool:
        """Return False for 204 and empty-body responses."""
        return bool(self.body and self.body.strip())

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class AuthFailure:
    """Missing or invalid API key (HTTP 401)."""


@dataclass(frozen=True)
class PermissionFailure:
    """Authenticated but not allowed to perform the operation (HTTP 403)."""


@dataclass(frozen=True)
class ValidationFailure:
    message: str


@dataclass(frozen=True)
class ServerError:
    status_code: int
    message: str


@dataclass(frozen=True)
class TransportFailure:
    message: str


@dataclass(frozen=True)
class Cancelled:
    """The caller abandoned the request; never shown to the user."""


@dataclass(frozen=True)
class InvalidURL:
    url: str
    reason: str = ""


RequestOutcome = Union[
    Success,
    AuthFailure,
    PermissionFailure,
    ValidationFailure,
    ServerError,
    TransportFailure,
    Cancelled,
]

FAILURE_TYPES = (
    AuthFailure,
    PermissionFailure,
    ValidationFailure,
    ServerError,
    TransportFailure,
)


def is_success(outcome: object) -> bool:
    return isinstance(outcome, Success)


def is_silent(outcome: object) -> bool:
    """Cancelled outcomes must not touch visible error state."""
    return isinstance(outcome, Cancelled)
