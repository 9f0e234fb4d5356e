import unittest
from unittest.mock import patch

import requests

from trmm_manager.screens.base import (
    AUTH_FAILED,
    INVALID_BASE_URL,
    MISSING_API_KEY,
    ScreenError,
    outcome_message,
)
from trmm_manager.core.outcome import PermissionFailure, ServerError
from trmm_manager.models import KeyStoreEntry
from trmm_manager.screens.keystore import KeyStoreController, KeyStoreDraft
from tests.helpers import API_KEY, DeferredSpawn, make_controller, response

HEADER_ERROR = UnicodeEncodeError("latin-1", "abc’def", 3, 4, "ordinal not in range(256)")

ENTRIES = [{"id": 2, "name": "beta", "value": "2"}, {"id": 1, "name": "Alpha", "value": "1"}]


class ScreenControllerBehaviorTests(unittest.TestCase):
    def test_load_sends_authenticated_get_and_applies_state(self):
        """Validate scenario: load resolves the key, sends GET and applies sorted entries."""
        controller, session = make_controller(KeyStoreController, response(200, ENTRIES))
        self.assertTrue(controller.load())
        call = session.calls[0]
        self.assertEqual((call.method, call.url), ("GET", "https://rmm.example.com/core/keystore/"))
        self.assertEqual(call.headers["X-API-KEY"], API_KEY)
        self.assertEqual([e.name for e in controller.entries], ["Alpha", "beta"])
        self.assertIsNone(controller.error_message)
        self.assertFalse(controller.is_loading)

    def test_missing_api_key_never_touches_network(self):
        """Validate scenario: a missing key reports the message and sends nothing."""
        controller, session = make_controller(KeyStoreController, api_key=None)
        controller.load()
        self.assertEqual(controller.error_message, MISSING_API_KEY)
        self.assertEqual(session.calls, [])

    def test_blank_api_key_is_missing(self):
        """Validate scenario: an empty stored key is reported as missing."""
        controller, session = make_controller(KeyStoreController, api_key="")
        controller.load()
        self.assertEqual(controller.error_message, MISSING_API_KEY)
        self.assertEqual(session.calls, [])

    def test_invalid_base_url_message(self):
        """Validate scenario: an unparsable base URL maps to the invalid URL message."""
        controller, session = make_controller(KeyStoreController, base_url="https://bad host")
        controller.load()
        self.assertEqual(controller.error_message, INVALID_BASE_URL)
        self.assertEqual(session.calls, [])

    def test_auth_and_permission_messages(self):
        """Validate scenario: 401 and 403 map to distinct messages."""
        controller, _ = make_controller(KeyStoreController, response(401), response(403))
        controller.load()
        self.assertEqual(controller.error_message, AUTH_FAILED)
        controller.load()
        self.assertEqual(controller.error_message, "You do not have permission to view the key store.")

    def test_server_error_without_body_uses_action_fallback(self):
        """Validate scenario: empty 5xx bodies read as HTTP <code> while <action>."""
        controller, _ = make_controller(KeyStoreController, response(500, b""))
        controller.load()
        self.assertEqual(controller.error_message, "HTTP 500 while loading key store.")

    def test_transport_failure_is_displayed(self):
        """Validate scenario: network errors surface their message."""
        controller, _ = make_controller(KeyStoreController, requests.Timeout())
        controller.load()
        self.assertEqual(controller.error_message, "The request timed out.")

    def test_undecodable_body_is_reported(self):
        """Validate scenario: a malformed body becomes a visible error."""
        controller, _ = make_controller(KeyStoreController, response(200, b"<html>"))
        controller.load()
        self.assertIn("KeyStoreEntry", controller.error_message)

    def test_success_clears_previous_error(self):
        """Validate scenario: a later successful load clears the error."""
        controller, _ = make_controller(KeyStoreController, response(500, b"down"), response(200, ENTRIES))
        controller.load()
        self.assertEqual(controller.error_message, "down")
        controller.load()
        self.assertIsNone(controller.error_message)

    def test_load_while_in_flight_is_ignored(self):
        """Validate scenario: a second load is a no-op unless forced."""
        spawn = DeferredSpawn()
        controller, session = make_controller(KeyStoreController, response(200, ENTRIES), spawn=spawn)
        self.assertTrue(controller.load())
        self.assertTrue(controller.is_loading)
        self.assertFalse(controller.load())
        self.assertEqual(len(spawn.jobs), 1)
        spawn.run_all()
        self.assertFalse(controller.is_loading)
        self.assertEqual(len(session.calls), 1)

    def test_forced_load_supersedes_older_result(self):
        """Validate scenario: only the newest load's result is applied."""
        spawn = DeferredSpawn()
        controller, _ = make_controller(
            KeyStoreController,
            response(500, b"stale failure"),
            response(200, ENTRIES),
            spawn=spawn,
        )
        controller.load()
        self.assertTrue(controller.load(force=True))
        spawn.run_all()
        self.assertIsNone(controller.error_message)
        self.assertEqual(len(controller.entries), 2)
        self.assertFalse(controller.is_loading)

    def test_cancelled_request_leaves_error_unchanged(self):
        """Validate scenario: closing a screen never changes its visible error."""
        spawn = DeferredSpawn()
        controller, session = make_controller(
            KeyStoreController, response(500, b"first failure"), response(500, b"second"), spawn=spawn
        )
        controller.load()
        spawn.run_all()
        self.assertEqual(controller.error_message, "first failure")

        controller.load(force=True)
        controller.close()
        spawn.run_all()
        self.assertEqual(controller.error_message, "first failure")
        self.assertEqual(len(session.calls), 1)
        self.assertTrue(session.closed)

    def test_closed_controller_ignores_new_work(self):
        """Validate scenario: nothing runs after close."""
        controller, session = make_controller(KeyStoreController)
        controller.close()
        self.assertFalse(controller.load())
        self.assertTrue(controller.closed)
        self.assertEqual(session.calls, [])

    def test_listeners_are_notified(self):
        """Validate scenario: subscribers see start and finish of a job."""
        controller, _ = make_controller(KeyStoreController, response(200, ENTRIES))
        seen = []
        controller.subscribe(lambda: seen.append(controller.is_loading))
        controller.load()
        self.assertEqual(seen, [True, False])

    def test_failed_mutation_keeps_display_state(self):
        """Validate scenario: a rejected save leaves entries untouched and alerts."""
        controller, session = make_controller(KeyStoreController, response(200, ENTRIES), response(400, b""))
        controller.load()
        before = list(controller.entries)
        draft = KeyStoreDraft()
        draft.name, draft.value = "new", "v"
        controller.save(draft)
        self.assertEqual(controller.entries, before)
        self.assertEqual(controller.alert_message, "Server rejected the request.")
        self.assertFalse(controller.succeeded("mutate"))
        self.assertEqual(len(session.calls), 2)

    def test_successful_mutation_reloads(self):
        """Validate scenario: a successful save triggers a forced reload."""
        controller, session = make_controller(
            KeyStoreController,
            response(200, ENTRIES),
            response(201, {"id": 3, "name": "new", "value": "v"}),
            response(200, ENTRIES + [{"id": 3, "name": "new", "value": "v"}]),
        )
        controller.load()
        draft = KeyStoreDraft()
        draft.name, draft.value = "new", "v"
        controller.save(draft)
        self.assertEqual([c.method for c in session.calls], ["GET", "POST", "GET"])
        self.assertEqual(len(controller.entries), 3)
        self.assertEqual(controller.status_message, "Saved key 'new'.")
        self.assertTrue(controller.succeeded("mutate"))

    def test_unencodable_api_key_is_reported_and_screen_recovers(self):
        """Validate scenario: a header encoding failure shows an error and frees the load channel."""
        controller, _ = make_controller(KeyStoreController, HEADER_ERROR, response(200, ENTRIES))
        self.assertTrue(controller.load())
        self.assertIn("latin-1", controller.error_message)
        self.assertFalse(controller.is_loading)
        self.assertTrue(controller.load())
        self.assertIsNone(controller.error_message)
        self.assertEqual(len(controller.entries), 2)

    def test_unexpected_work_error_is_reported(self):
        """Validate scenario: an arbitrary exception in background work ends the job with an error."""
        controller, _ = make_controller(KeyStoreController)
        with patch.object(controller, "_fetch", side_effect=RuntimeError("boom")):
            controller.load()
        self.assertEqual(controller.error_message, "boom")
        self.assertFalse(controller.is_loading)
        self.assertFalse(controller.succeeded("load"))

    def test_failing_apply_still_ends_job(self):
        """Validate scenario: an applier that raises still frees the channel."""
        controller, _ = make_controller(KeyStoreController)

        def broken():
            raise ValueError("bad state")

        with patch.object(controller, "_fetch", return_value=broken):
            controller.load()
        self.assertEqual(controller.error_message, "bad state")
        self.assertFalse(controller.is_loading)
        self.assertFalse(controller.succeeded("load"))

    def test_second_mutation_is_rejected_while_one_is_in_flight(self):
        """Validate scenario: a screen runs one mutation at a time."""
        spawn = DeferredSpawn()
        entry = KeyStoreEntry(id=1, name="Alpha", value="1")
        controller, session = make_controller(
            KeyStoreController, response(201, b""), response(200, ENTRIES), spawn=spawn
        )
        draft = KeyStoreDraft()
        draft.name, draft.value = "new", "v"
        self.assertTrue(controller.save(draft))
        self.assertEqual(controller.mutation, "save")
        self.assertFalse(controller.delete(entry))
        self.assertEqual(len(spawn.jobs), 1)
        spawn.run_all()
        self.assertIsNone(controller.mutation)
        self.assertEqual([c.method for c in session.calls], ["POST", "GET"])

    def test_demo_profile_never_touches_network(self):
        """Validate scenario: demo instances answer from canned data."""
        controller, session = make_controller(KeyStoreController, base_url="demo", api_key=None)
        controller.load()
        self.assertEqual([e.name for e in controller.entries], ["DemoKey"])
        self.assertIsNone(controller.error_message)
        self.assertEqual(session.calls, [])

    def test_outcome_message_mapping(self):
        """Validate scenario: failure values map to their display text."""
        self.assertEqual(outcome_message(PermissionFailure(), "Nope."), "Nope.")
        self.assertEqual(outcome_message(ServerError(502, "")), "HTTP 502.")

    def test_screen_error_carries_status(self):
        """Validate scenario: ScreenError keeps message and status code."""
        err = ScreenError("gone", status_code=404)
        self.assertEqual((str(err), err.status_code), ("gone", 404))


if __name__ == "__main__":
    unittest.main()
