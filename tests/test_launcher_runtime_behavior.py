import queue
import unittest
from types import SimpleNamespace

from trmm_manager.launcher.app_runtime import AppRuntimeMixin
from trmm_manager.screens.keystore import KeyStoreController
from trmm_manager.services import NoActiveProfile
from tests.helpers import make_controller


class _Toasts:
    def __init__(self):
        self.shown = []

    def show(self, message, level="info", duration_ms=0):
        self.shown.append((message, level))


class _Services:
    def __init__(self, controller=None):
        self.controller = controller
        self.preferences = SimpleNamespace(get=lambda key, default=None: "en")
        self.opened = []

    def open_screen(self, name, dispatch=None):
        self.opened.append((name, dispatch))
        if self.controller is None:
            raise NoActiveProfile("No server instance configured.")
        return self.controller


class _DummyRuntime(AppRuntimeMixin):
    def __init__(self, services):
        self.services = services
        self.controller = None
        self._ui_queue = queue.Queue()
        self.toast_manager = _Toasts()
        self.scheduled = []
        self.destroyed = False

    def winfo_exists(self):
        return True

    def after(self, delay_ms, callback):
        self.scheduled.append(delay_ms)
        return "after#1"

    def destroy(self):
        self.destroyed = True


class LauncherRuntimeBehaviorTests(unittest.TestCase):
    def test_ui_queue_runs_callbacks_and_reschedules(self):
        """Validate scenario: queued callbacks run in order; errors do not stop the loop."""
        runtime = _DummyRuntime(_Services())
        seen = []
        runtime.ui_call(lambda: seen.append(1))
        runtime.ui_call(lambda: 1 / 0)
        runtime.ui_call(lambda: seen.append(2))
        with self.assertLogs("trmm_manager.launcher", level="ERROR"):
            runtime._process_ui_queue()
        self.assertEqual(seen, [1, 2])
        self.assertEqual(runtime.scheduled, [50])

    def test_open_controller_without_profile(self):
        """Validate scenario: no configured instance yields no controller."""
        runtime = _DummyRuntime(_Services())
        self.assertIsNone(runtime.open_controller("keystore"))
        self.assertIsNone(runtime.controller)

    def test_open_controller_uses_ui_queue_and_reports_messages(self):
        """Validate scenario: controller messages become one-shot toasts."""
        controller, _ = make_controller(KeyStoreController)
        services = _Services(controller)
        runtime = _DummyRuntime(services)
        self.assertIs(runtime.open_controller("keystore"), controller)
        self.assertEqual(services.opened[0][1], runtime.ui_call)

        controller.alert_message = "Name is required."
        controller.status_message = "Saved key 'x'."
        controller._notify()
        self.assertEqual(
            runtime.toast_manager.shown,
            [("Name is required.", "error"), ("Saved key 'x'.", "success")],
        )
        self.assertIsNone(controller.alert_message)
        self.assertIsNone(controller.status_message)

    def test_switching_screens_closes_previous_controller(self):
        """Validate scenario: navigating away cancels the old screen."""
        first, first_session = make_controller(KeyStoreController)
        runtime = _DummyRuntime(_Services(first))
        runtime.open_controller("keystore")
        second, _ = make_controller(KeyStoreController)
        runtime.services.controller = second
        runtime.open_controller("keystore")
        self.assertTrue(first.closed)
        self.assertTrue(first_session.closed)
        self.assertIs(runtime.controller, second)

    def test_on_close_cancels_and_destroys(self):
        """Validate scenario: closing the window closes the active controller."""
        controller, _ = make_controller(KeyStoreController)
        runtime = _DummyRuntime(_Services(controller))
        runtime.open_controller("keystore")
        runtime.on_close()
        self.assertTrue(controller.closed)
        self.assertIsNone(runtime.controller)
        self.assertTrue(runtime.destroyed)

    def test_tr_uses_preferences_language(self):
        """Validate scenario: translation reads the configured language."""
        runtime = _DummyRuntime(_Services())
        self.assertEqual(runtime.tr("save"), "Save")


if __name__ == "__main__":
    unittest.main()
