"""Map HTTP status codes and transport errors onto `RequestOutcome` values."""

from typing import Callable, Optional, Union

import requests

from .outcome import (
    AuthFailure,
    Cancelled,
    PermissionFailure,
    RequestOutcome,
    ServerError,
    Success,
    TransportFailure,
    ValidationFailure,
)


SUCCESS_CODES = frozenset({200, 201, 202, 204})

Fallback = Union[str, Callable[[int], str]]


class RequestCancelled(Exception):
    """Raised inside a round trip that was abandoned by its caller."""


def extract_message(body: Optional[bytes], fallback: str = "") -> str:
    """Readable text from a response body.

    Decodes as UTF-8, trims whitespace, drops one pair of wrapping double
    quotes (the server often returns JSON strings) and trims again.
    """
    if isinstance(body, str):
        text = body
    else:
        text = (body or b"").decode("utf-8", errors="replace")
    text = text.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]
    text = text.strip()
    return text or fallback


def _fallback_text(fallback: Fallback, status_code: int) -> str:
    if callable(fallback):
        return str(fallback(status_code) or "")
    return str(fallback or "")


def classify(status_code: int, body: Optional[bytes] = b"", fallback_message: Fallback = "") -> RequestOutcome:
    code = int(status_code)
    if code in SUCCESS_CODES:
        return Success(status_code=code, body=bytes(body or b""))
    if code == 401:
        return AuthFailure()
    if code == 403:
        return PermissionFailure()
    message = extract_message(body, _fallback_text(fallback_message, code))
    if code == 400:
        return ValidationFailure(message)
    return ServerError(code, message)


def classify_exception(exc: BaseException, cancelled: bool = False) -> RequestOutcome:
    if cancelled or isinstance(exc, RequestCancelled):
        return Cancelled()
    if isinstance(exc, requests.Timeout):
        return TransportFailure("The request timed out.")
    if isinstance(exc, requests.ConnectionError):
        return TransportFailure(f"Could not connect to the server: {exc}")
    return TransportFailure(str(exc) or type(exc).__name__)
