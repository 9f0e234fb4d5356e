import json
import string
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlsplit

import requests

from .. import config
from .credentials import Secret
from .outcome import InvalidURL


JSON_CONTENT_TYPE = "application/json"

# RFC 3986 unreserved + reserved characters, plus '%' for escapes.
_URL_CHARS = frozenset(string.ascii_letters + string.digits + "-._~:/?#[]@!$&'()*+,;=%")


@dataclass(frozen=True)
class ApiRequest:
    method: str
    url: str
    headers: Mapping[str, str] = field(repr=False)
    body: Optional[bytes] = field(default=None, repr=False)
    timeout: float = config.DEFAULT_REQUEST_TIMEOUT_S

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = str(name).lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


def _url_problem(url: str) -> str:
    """Return a reason string when `url` is not an absolute http(s) URL."""
    if not url:
        return "empty url"
    bad = sorted({ch for ch in url if ch not in _URL_CHARS})
    if bad:
        return f"illegal characters: {''.join(bad)!r}"
    try:
        parts = urlsplit(url)
        parts.port
    except ValueError as e:
        return str(e) or "unparseable url"
    if parts.scheme.lower() not in ("http", "https"):
        return "scheme must be http or https"
    if not parts.hostname:
        return "missing host"
    try:
        requests.PreparedRequest().prepare_url(url, None)
    except (requests.RequestException, ValueError) as e:
        return str(e) or "rejected by requests"
    return ""


def _encode_body(body: Any) -> Optional[bytes]:
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


def build(
    base_url: str,
    path: str,
    method: str,
    secret: Union[str, Secret],
    body: Any = None,
    timeout: Optional[float] = None,
    api_key_header: str = config.API_KEY_HEADER,
) -> Union[ApiRequest, InvalidURL]:
    """Compose an authenticated request, or InvalidURL when the target does not parse."""
    url = f"{base_url or ''}{path or ''}"
    problem = _url_problem(url)
    if problem:
        return InvalidURL(url=url, reason=problem)

    key = secret.value if isinstance(secret, Secret) else str(secret or "")
    headers = {
        "accept": "*/*",
        api_key_header: key,
    }
    data = _encode_body(body)
    if data is not None:
        headers["content-type"] = JSON_CONTENT_TYPE

    return ApiRequest(
        method=str(method or "GET").upper(),
        url=url,
        headers=headers,
        body=data,
        timeout=float(timeout) if timeout is not None else config.DEFAULT_REQUEST_TIMEOUT_S,
    )
