"""Shared controller for every screen that talks to the server.

A controller owns the display state of one open screen and runs its
network work through the core: resolve the API key, build the request,
send it, classify the outcome. Work runs via `spawn` (a daemon thread by
default) and state changes are applied via `dispatch` (the launcher's UI
queue). Tests inject synchronous callables for both.

Channels keep concurrency per screen simple: each named channel allows one
job in flight. Every write goes through the single `mutate` channel, tagged
with what it does; reads use `load` or a screen-specific read channel. A
second `load` while one is running is ignored unless forced.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Type

from ..config import ClientConfig
from ..core.classifier import RequestCancelled
from ..core.credentials import CredentialResolver, is_missing
from ..core.outcome import (
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
from ..core.request_builder import build
from ..core.transport import ApiClient, DecodeError
from ..logging_config import get_logger
from ..profiles import ServerProfile

log = get_logger("screens")

MISSING_API_KEY = "Missing API key for this instance."
INVALID_BASE_URL = "Invalid base URL."
AUTH_FAILED = "Invalid API key or insufficient permissions."
NO_PERMISSION = "You do not have permission to perform this action."

Applier = Optional[Callable[[], None]]


class ScreenError(Exception):
    """A displayable failure raised from background work."""

    def __init__(self, message: str, status_code: Optional[int] = None, apply: Applier = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.apply = apply


class DraftError(Exception):
    """A form draft failed local validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _thread_spawn(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True).start()


def _immediate(fn: Callable[[], None]) -> None:
    fn()


def outcome_message(outcome: RequestOutcome, forbidden: str = NO_PERMISSION) -> str:
    """Displayable text for a failed outcome."""
    if isinstance(outcome, AuthFailure):
        return AUTH_FAILED
    if isinstance(outcome, PermissionFailure):
        return forbidden
    if isinstance(outcome, (ValidationFailure, TransportFailure)):
        return outcome.message
    if isinstance(outcome, ServerError):
        return outcome.message or f"HTTP {outcome.status_code}."
    return "Unexpected response."


class ScreenController:
    """Base class for per-screen controllers."""

    title = ""

    def __init__(
        self,
        profile: ServerProfile,
        resolver: CredentialResolver,
        *,
        client_config: Optional[ClientConfig] = None,
        api_client: Optional[ApiClient] = None,
        dispatch: Optional[Callable[[Callable[[], None]], None]] = None,
        spawn: Optional[Callable[[Callable[[], None]], None]] = None,
        date_format: str = "",
    ) -> None:
        self.profile = profile
        self.resolver = resolver
        self.client_config = client_config or ClientConfig()
        self.client = api_client or ApiClient(verify=self.client_config.verify)
        self.dispatch = dispatch or _immediate
        self.spawn = spawn or _thread_spawn
        self.date_format = date_format

        self.error_message: Optional[str] = None
        self.alert_message: Optional[str] = None
        self.status_message: Optional[str] = None

        self._lock = threading.Lock()
        self._busy: Dict[str, int] = {}
        self._last_ok: Dict[str, bool] = {}
        self._tags: Dict[str, str] = {}
        self._generation = 0
        self._listeners: List[Callable[[], None]] = []
        self._closed = False

    # State

    @property
    def is_demo(self) -> bool:
        return self.profile.is_demo

    @property
    def is_loading(self) -> bool:
        return self.is_busy("load")

    @property
    def is_mutating(self) -> bool:
        return self.is_busy("mutate")

    @property
    def closed(self) -> bool:
        return self._closed

    def is_busy(self, channel: str) -> bool:
        with self._lock:
            return channel in self._busy

    def succeeded(self, channel: str) -> bool:
        """True when the last finished job on `channel` succeeded."""
        with self._lock:
            return self._last_ok.get(channel, False)

    @property
    def mutation(self) -> Optional[str]:
        """Tag of the mutation in flight, or None."""
        with self._lock:
            return self._tags.get("mutate") if "mutate" in self._busy else None

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                log.error("Screen listener failed: %s", e)

    def clear_messages(self) -> None:
        self.alert_message = None
        self.status_message = None
        self._notify()

    # Lifecycle

    def load(self, force: bool = False) -> bool:
        """Fetch display state. Returns False when ignored."""
        return self._run("load", self._load_work, error_attr="error_message", force=force)

    def _load_work(self) -> Applier:
        if self.is_demo:
            return self._demo_load()
        return self._fetch()

    def _fetch(self) -> Applier:
        raise NotImplementedError

    def _demo_load(self) -> Applier:
        return None

    def close(self) -> None:
        """Cancel outstanding requests; later results are dropped."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        self.client.cancel()
        log.debug("Closed %s screen", self.title or type(self).__name__)

    # Job runner

    def _begin(self, channel: str, force: bool, tag: Optional[str] = None) -> Optional[int]:
        with self._lock:
            if self._closed:
                return None
            if channel in self._busy and not force:
                return None
            self._generation += 1
            self._busy[channel] = self._generation
            self._tags[channel] = tag or channel
            return self._generation

    def _is_current(self, channel: str, generation: int) -> bool:
        with self._lock:
            return self._busy.get(channel) == generation

    def _end(self, channel: str, generation: int) -> bool:
        with self._lock:
            if self._busy.get(channel) != generation:
                return False
            del self._busy[channel]
            self._tags.pop(channel, None)
            return True

    def _record(self, channel: str, ok: bool) -> None:
        with self._lock:
            self._last_ok[channel] = ok

    def _run(
        self,
        channel: str,
        work: Callable[[], Applier],
        *,
        error_attr: str,
        force: bool = False,
        reload_on_success: bool = False,
        tag: Optional[str] = None,
    ) -> bool:
        generation = self._begin(channel, force, tag)
        if generation is None:
            log.debug("%s: %s ignored, already in flight", type(self).__name__, tag or channel)
            return False
        self._notify()

        def finish(apply: Applier = None, error: Optional[ScreenError] = None) -> None:
            if self._closed:
                self._end(channel, generation)
                return
            if not self._is_current(channel, generation):
                return
            ok = error is None
            try:
                if error is not None:
                    if error.apply is not None:
                        error.apply()
                    setattr(self, error_attr, error.message)
                else:
                    setattr(self, error_attr, None)
                    if apply is not None:
                        apply()
            except Exception as e:
                log.exception("%s: applying %s failed", type(self).__name__, tag or channel)
                ok = False
                setattr(self, error_attr, str(e) or type(e).__name__)
            finally:
                self._record(channel, ok)
                self._end(channel, generation)
            self._notify()
            if ok and reload_on_success:
                self.load(force=True)

        def silent() -> None:
            self._end(channel, generation)
            if not self._closed:
                self._notify()

        def fail(err: ScreenError) -> None:
            self.dispatch(lambda: finish(error=err))

        def job() -> None:
            try:
                apply = work()
            except RequestCancelled:
                log.debug("%s: %s cancelled", type(self).__name__, tag or channel)
                self.dispatch(silent)
                return
            except ScreenError as e:
                fail(e)
                return
            except DraftError as e:
                fail(ScreenError(e.message))
                return
            except DecodeError as e:
                log.error("%s: %s", type(self).__name__, e)
                fail(ScreenError(str(e)))
                return
            except Exception as e:
                log.exception("%s: %s failed", type(self).__name__, tag or channel)
                fail(ScreenError(str(e) or type(e).__name__))
                return
            self.dispatch(lambda: finish(apply=apply))

        self.spawn(job)
        return True

    def _mutate(
        self,
        work: Callable[[], Applier],
        *,
        tag: str = "mutate",
        error_attr: str = "alert_message",
        reload: bool = True,
    ) -> bool:
        """Run a mutation on the screen's single mutate channel.

        Only one mutation is in flight per screen; `tag` names which one so
        pages can tell a delete from a save. Success re-loads the screen when
        `reload` is set, failure keeps display state.
        """
        return self._run("mutate", work, error_attr=error_attr, reload_on_success=reload, tag=tag)

    # Request helpers used from background work

    def _send(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        action: str,
        forbidden: str = NO_PERMISSION,
        fallback: Optional[str] = None,
    ) -> Success:
        """Resolve the key, build and send; raise ScreenError on any failure."""
        secret = self.resolver.resolve(self.profile)
        if is_missing(secret):
            raise ScreenError(MISSING_API_KEY)
        request = build(
            self.profile.base_url,
            path,
            method,
            secret,
            body,
            timeout=self.client_config.timeout_s,
            api_key_header=self.client_config.api_key_header,
        )
        if isinstance(request, InvalidURL):
            log.error("Invalid URL for %s %s: %s", method, path, request.reason)
            raise ScreenError(INVALID_BASE_URL)

        def default_fallback(code: int) -> str:
            return fallback or f"HTTP {code} while {action}."

        outcome = self.client.send(request, default_fallback)
        return self._expect_success(outcome, forbidden)

    def _expect_success(self, outcome: RequestOutcome, forbidden: str = NO_PERMISSION) -> Success:
        if isinstance(outcome, Success):
            return outcome
        if isinstance(outcome, Cancelled):
            raise RequestCancelled()
        status = getattr(outcome, "status_code", None)
        if isinstance(outcome, ValidationFailure):
            status = 400
        elif isinstance(outcome, AuthFailure):
            status = 401
        elif isinstance(outcome, PermissionFailure):
            status = 403
        raise ScreenError(outcome_message(outcome, forbidden), status_code=status)

    def _decode(self, outcome: Success, model: Type, many: bool = False) -> Any:
        return self.client.decode(outcome, model, many=many)
