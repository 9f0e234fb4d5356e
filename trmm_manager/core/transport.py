"""HTTP transport that turns an `ApiRequest` into a `RequestOutcome`."""

import threading
from typing import Any, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..diagnostics import log_http_request, log_http_response
from ..logging_config import get_logger
from .classifier import Fallback, RequestCancelled, classify, classify_exception
from .outcome import Cancelled, RequestOutcome, Success
from .request_builder import ApiRequest

log = get_logger("transport")

M = TypeVar("M", bound=BaseModel)


class DecodeError(Exception):
    """Response body could not be decoded into the expected record."""


class CancelToken:
    """Thread-safe cancel flag shared by a controller and its client."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled()


class ApiClient:
    """Thin wrapper around `requests.Session` returning classified outcomes."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        verify: bool | str = True,
        token: Optional[CancelToken] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.verify = verify
        self.token = token or CancelToken()

    def send(self, request: ApiRequest, fallback_message: Fallback = "") -> RequestOutcome:
        """Execute one round trip. Never raises for HTTP or network failures."""
        if self.token.cancelled:
            return Cancelled()

        log_http_request(request.method, request.url, request.headers)
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                data=request.body,
                timeout=request.timeout,
                verify=self.verify,
            )
        except requests.RequestException as e:
            return classify_exception(e, cancelled=self.token.cancelled)
        except Exception as e:
            # A closed session can fail with arbitrary errors mid-read; header
            # encoding errors surface here too since requests does not wrap them.
            if not self.token.cancelled:
                log.error("%s %s failed: %s: %s", request.method, request.url, type(e).__name__, e)
            return classify_exception(e, cancelled=self.token.cancelled)

        if self.token.cancelled:
            return Cancelled()

        body = response.content or b""
        log_http_response(request.method, request.url, response.status_code, body)
        return classify(response.status_code, body, fallback_message)

    def cancel(self) -> None:
        """Abandon any in-flight request and refuse new ones."""
        self.token.cancel()
        try:
            self.session.close()
        except Exception:
            pass

    @staticmethod
    def decode(outcome: RequestOutcome, model: Type[M], many: bool = False) -> Any:
        """Decode a Success body into `model` (or a list of it when `many`)."""
        if not isinstance(outcome, Success):
            raise DecodeError(f"Cannot decode {type(outcome).__name__}.")
        if not outcome.has_body:
            raise DecodeError("Empty response body.")
        try:
            if many:
                return TypeAdapter(list[model]).validate_json(outcome.body)
            return model.model_validate_json(outcome.body)
        except ValidationError as e:
            raise DecodeError(f"Failed to decode {model.__name__}: {e.error_count()} error(s).") from e
