from __future__ import annotations

import queue
from typing import Any, Callable, Optional

from trmm_manager.launcher.i18n import tr as i18n_tr
from trmm_manager.launcher.shared import UI_QUEUE_POLL_MS
from trmm_manager.launcher.toasts import take_messages
from trmm_manager.logging_config import get_logger
from trmm_manager.screens import ScreenController
from trmm_manager.services import NoActiveProfile

log = get_logger("launcher")


class AppRuntimeMixin:
    """UI-thread queue, toasts and controller lifecycle."""

    _ui_queue: "queue.Queue[Callable[[], None]]"
    controller: Optional[ScreenController]

    def _safe_after(self, delay_ms: int, callback: Any) -> Any:
        """Schedule a Tk callback only if the root window is alive."""
        try:
            if not self.winfo_exists():
                return None
            return self.after(int(delay_ms), callback)
        except RuntimeError:
            return None

    def ui_call(self, fn: Callable[[], None]) -> None:
        """Queue a callable that must run on the UI thread."""
        self._ui_queue.put(fn)

    def _process_ui_queue(self) -> None:
        """Execute pending UI-thread callbacks from the queue."""
        while True:
            try:
                fn = self._ui_queue.get_nowait()
            except queue.Empty:
                break
            try:
                fn()
            except Exception as e:
                log.exception("UI callback error: %s", e)
        self._safe_after(UI_QUEUE_POLL_MS, self._process_ui_queue)

    def tr(self, key: str, **kwargs: Any) -> str:
        return i18n_tr(self.services.preferences.get("language", "en"), key, **kwargs)

    def show_toast(self, message: str, level: str = "info", duration_ms: int = 2600) -> None:
        manager = getattr(self, "toast_manager", None)
        if manager is None:
            return
        manager.show(message, level=level, duration_ms=duration_ms)

    def open_controller(self, name: str) -> Optional[ScreenController]:
        """Close the current screen's controller and open one for `name`."""
        self.close_controller()
        try:
            controller = self.services.open_screen(name, dispatch=self.ui_call)
        except NoActiveProfile:
            return None
        controller.subscribe(lambda c=controller: self._report_messages(c))
        self.controller = controller
        return controller

    def close_controller(self) -> None:
        if self.controller is not None:
            self.controller.close()
        self.controller = None

    def _report_messages(self, controller: ScreenController) -> None:
        """Turn one-shot alert and status messages into toasts."""
        for text, level, duration_ms in take_messages(controller):
            self.show_toast(text, level=level, duration_ms=duration_ms)

    def on_close(self) -> None:
        """Cancel in-flight work and close the window."""
        self.close_controller()
        log.info("Launcher closed")
        self.destroy()
