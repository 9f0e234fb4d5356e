"""HTTP diagnostics helpers: secret masking and request/response log lines."""

from typing import Mapping, Optional

from .logging_config import get_logger

log = get_logger("http")

REDACTED = "[REDACTED]"
RESPONSE_PREVIEW_CHARS = 200

SENSITIVE_URL_FRAGMENTS = (
    "/core/keystore",
    "/core/codesign",
    "/core/settings",
    "/accounts/users/reset",
    "/accounts/users/reset_totp",
    "/accounts/users/",
    "/accounts/sessions",
    "/scripts/",
)

_SENSITIVE_HEADERS = {"x-api-key", "authorization", "cookie", "set-cookie"}


def mask_api_key(key: str) -> str:
    """Keep the first and last four characters of a key, hide the rest."""
    value = str(key or "")
    if len(value) <= 8:
        return "X" * len(value)
    return f"{value[:4]}XXXXXXXXXXXXXX{value[-4:]}"


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy headers with credentials replaced by a redaction marker."""
    out: dict[str, str] = {}
    for name, value in dict(headers or {}).items():
        out[str(name)] = REDACTED if str(name).lower() in _SENSITIVE_HEADERS else str(value)
    return out


def is_sensitive_url(url: str) -> bool:
    """Return True when response bodies from this URL may carry secrets."""
    text = str(url or "")
    return any(fragment in text for fragment in SENSITIVE_URL_FRAGMENTS)


def describe_body(url: str, body: Optional[bytes]) -> str:
    """Render a response body for the log, redacted or truncated."""
    if is_sensitive_url(url):
        return REDACTED
    if not body:
        return "No response body."
    text = body.decode("utf-8", errors="replace")
    if len(text) > RESPONSE_PREVIEW_CHARS:
        return text[:RESPONSE_PREVIEW_CHARS] + "..."
    return text


def log_http_request(method: str, url: str, headers: Mapping[str, str]) -> None:
    log.info("HTTP Request: %s %s Headers: %s", method, url, sanitize_headers(headers))


def log_http_response(method: str, url: str, status: int, body: Optional[bytes]) -> None:
    log.info(
        "HTTP Response: %s for %s %s. Response Body: %s",
        status,
        method,
        url,
        describe_body(url, body),
    )
