import unittest

from trmm_manager.screens.codesign import SIGN_ALL_QUEUED, CodeSigningController
from tests.helpers import make_controller, response


class CodeSigningBehaviorTests(unittest.TestCase):
    def test_load_reads_token(self):
        """Validate scenario: the stored token is shown after load."""
        controller, _ = make_controller(CodeSigningController, response(200, {"token": "TKN"}))
        controller.load()
        self.assertEqual(controller.token, "TKN")
        self.assertTrue(controller.has_token)

    def test_update_patches_trimmed_token(self):
        """Validate scenario: PATCH sends the trimmed token then reloads."""
        controller, session = make_controller(
            CodeSigningController, response(200, b""), response(200, {"token": "NEW"})
        )
        controller.update_token("  NEW  ")
        self.assertEqual(session.calls[0].method, "PATCH")
        self.assertEqual(session.json_body(0), {"token": "NEW"})
        self.assertEqual(controller.token, "NEW")
        self.assertEqual(controller.status_message, "Code signing token updated.")

    def test_blank_token_is_rejected_locally(self):
        """Validate scenario: an empty token never reaches the server."""
        controller, session = make_controller(CodeSigningController)
        controller.update_token("   ")
        self.assertEqual(controller.alert_message, "Token is required.")
        self.assertEqual(session.calls, [])

    def test_sign_all_requires_token(self):
        """Validate scenario: signing without a token alerts and sends nothing."""
        controller, session = make_controller(CodeSigningController)
        self.assertFalse(controller.sign_all_agents())
        self.assertEqual(controller.alert_message, "Add a code signing token before signing agents.")
        self.assertEqual(session.calls, [])

    def test_sign_all_shows_server_message(self):
        """Validate scenario: the POST body text becomes the sign-all message."""
        controller, session = make_controller(
            CodeSigningController,
            response(200, {"token": "TKN"}),
            response(200, '"Agents will be code signed shortly"'),
        )
        controller.load()
        self.assertTrue(controller.sign_all_agents())
        self.assertEqual(session.calls[1].method, "POST")
        self.assertEqual(controller.sign_all_message, "Agents will be code signed shortly")

    def test_sign_all_empty_body_uses_default(self):
        """Validate scenario: an empty success body falls back to the queued message."""
        controller, _ = make_controller(CodeSigningController, response(200, {"token": "T"}), response(202))
        controller.load()
        controller.sign_all_agents()
        self.assertEqual(controller.sign_all_message, SIGN_ALL_QUEUED)

    def test_sign_all_unavailable_for_demo(self):
        """Validate scenario: demo instances explain that bulk signing is offline."""
        controller, session = make_controller(CodeSigningController, base_url="demo", api_key=None)
        controller.load()
        self.assertFalse(controller.sign_all_agents())
        self.assertIn("demo", controller.sign_all_message)
        self.assertEqual(session.calls, [])

    def test_delete_clears_token_without_reload(self):
        """Validate scenario: DELETE clears local token state."""
        controller, session = make_controller(CodeSigningController, response(200, {"token": "T"}), response(204))
        controller.load()
        controller.delete_token()
        self.assertIsNone(controller.token)
        self.assertEqual([c.method for c in session.calls], ["GET", "DELETE"])


if __name__ == "__main__":
    unittest.main()
