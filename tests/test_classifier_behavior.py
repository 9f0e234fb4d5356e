import unittest

import requests

from trmm_manager.core.classifier import RequestCancelled, classify, classify_exception, extract_message
from trmm_manager.core.outcome import (
    AuthFailure,
    Cancelled,
    PermissionFailure,
    ServerError,
    Success,
    TransportFailure,
    ValidationFailure,
    is_silent,
    is_success,
)


class ClassifierBehaviorTests(unittest.TestCase):
    def test_success_codes_map_to_success(self):
        """Validate scenario: 200, 201, 202 and 204 are all successes."""
        for code in (200, 201, 202, 204):
            with self.subTest(code=code):
                outcome = classify(code, b"{}")
                self.assertIsInstance(outcome, Success)
                self.assertEqual(outcome.status_code, code)
                self.assertTrue(is_success(outcome))

    def test_204_success_has_no_body(self):
        """Validate scenario: a 204 response carries an empty body."""
        outcome = classify(204, b"")
        self.assertIsInstance(outcome, Success)
        self.assertFalse(outcome.has_body)

    def test_401_is_auth_failure_regardless_of_body(self):
        """Validate scenario: 401 always maps to AuthFailure."""
        self.assertEqual(classify(401, b'"Invalid token."'), AuthFailure())
        self.assertEqual(classify(401), AuthFailure())

    def test_403_is_permission_failure(self):
        """Validate scenario: 403 maps to PermissionFailure, distinct from 401."""
        self.assertEqual(classify(403, b"nope"), PermissionFailure())
        self.assertNotEqual(classify(403), classify(401))

    def test_400_extracts_quoted_message(self):
        """Validate scenario: a JSON string body loses its wrapping quotes."""
        self.assertEqual(classify(400, b'"Bad token"'), ValidationFailure("Bad token"))

    def test_400_empty_body_uses_fallback(self):
        """Validate scenario: an empty 400 body falls back to the caller's text."""
        self.assertEqual(classify(400, b"", "Server rejected the token."), ValidationFailure("Server rejected the token."))

    def test_500_keeps_status_and_message(self):
        """Validate scenario: 500 with a plain body becomes ServerError."""
        self.assertEqual(classify(500, b"internal error"), ServerError(500, "internal error"))

    def test_unknown_status_uses_callable_fallback(self):
        """Validate scenario: a callable fallback receives the status code."""
        outcome = classify(502, b"   ", lambda code: f"HTTP {code} while loading scripts.")
        self.assertEqual(outcome, ServerError(502, "HTTP 502 while loading scripts."))

    def test_404_is_server_error(self):
        """Validate scenario: 404 is reported as a server error with its code."""
        outcome = classify(404, b"Not found.")
        self.assertIsInstance(outcome, ServerError)
        self.assertEqual(outcome.status_code, 404)

    def test_extract_message_trims_whitespace_inside_quotes(self):
        """Validate scenario: whitespace is trimmed before and after unquoting."""
        self.assertEqual(extract_message(b'  " Agents will be signed "  \n'), "Agents will be signed")

    def test_extract_message_strips_only_one_quote_layer(self):
        """Validate scenario: nested quotes keep the inner pair."""
        self.assertEqual(extract_message(b'""quoted""'), '"quoted"')

    def test_extract_message_accepts_text_and_handles_bad_utf8(self):
        """Validate scenario: str bodies pass through; invalid bytes do not raise."""
        self.assertEqual(extract_message("plain"), "plain")
        self.assertTrue(extract_message(b"\xff\xfe oops").endswith("oops"))

    def test_extract_message_lone_quote_is_kept(self):
        """Validate scenario: a single quote character is not treated as a wrapper."""
        self.assertEqual(extract_message(b'"'), '"')

    def test_timeout_exception_maps_to_transport_failure(self):
        """Validate scenario: a requests timeout becomes a TransportFailure."""
        outcome = classify_exception(requests.Timeout("slow"))
        self.assertEqual(outcome, TransportFailure("The request timed out."))

    def test_connection_error_mentions_connect(self):
        """Validate scenario: connection errors carry a readable message."""
        outcome = classify_exception(requests.ConnectionError("refused"))
        self.assertIsInstance(outcome, TransportFailure)
        self.assertIn("Could not connect", outcome.message)
        self.assertIn("refused", outcome.message)

    def test_cancelled_flag_wins_over_exception_type(self):
        """Validate scenario: an error raised after cancellation is silent."""
        outcome = classify_exception(requests.ConnectionError("closed"), cancelled=True)
        self.assertEqual(outcome, Cancelled())
        self.assertTrue(is_silent(outcome))
        self.assertEqual(classify_exception(RequestCancelled()), Cancelled())


if __name__ == "__main__":
    unittest.main()
