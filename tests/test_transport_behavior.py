import unittest
from unittest.mock import patch

import requests
from pydantic import BaseModel

from trmm_manager.core.credentials import Secret
from trmm_manager.core.outcome import AuthFailure, Cancelled, Success, TransportFailure, ValidationFailure
from trmm_manager.core.request_builder import build
from trmm_manager.core.transport import ApiClient, CancelToken, DecodeError
from trmm_manager.core.classifier import RequestCancelled
from trmm_manager.models import CodeSigningToken, KeyStoreEntry
from tests.helpers import FakeSession, response


def _request(method="GET", path="/core/codesign/", body=None):
    return build("https://x.test", path, method, Secret("abcd1234efgh5678"), body, timeout=7)


class TransportBehaviorTests(unittest.TestCase):
    def test_send_passes_request_fields_to_session(self):
        """Validate scenario: method, url, headers, body, timeout and verify reach requests."""
        session = FakeSession(response(200, {"token": "abc"}))
        client = ApiClient(session=session, verify="/etc/ca.pem")
        client.send(_request("PATCH", body={"token": "abc"}))
        call = session.calls[0]
        self.assertEqual(call.method, "PATCH")
        self.assertEqual(call.url, "https://x.test/core/codesign/")
        self.assertEqual(call.headers["X-API-KEY"], "abcd1234efgh5678")
        self.assertEqual(call.timeout, 7.0)
        self.assertEqual(call.verify, "/etc/ca.pem")
        self.assertEqual(session.json_body(), {"token": "abc"})

    def test_default_session_goes_through_requests(self):
        """Validate scenario: a client without an injected session uses requests.Session."""
        with patch("trmm_manager.core.transport.requests.Session.request") as mreq:
            mreq.return_value = response(204)
            outcome = ApiClient().send(_request("DELETE"))
        self.assertEqual(outcome, Success(204))
        args, kwargs = mreq.call_args
        self.assertEqual(args, ("DELETE", "https://x.test/core/codesign/"))
        self.assertTrue(kwargs["verify"])

    def test_get_token_decodes_single_record(self):
        """Validate scenario: GET 200 {"token":"abc"} decodes to a token record."""
        client = ApiClient(session=FakeSession(response(200, b'{"token":"abc"}')))
        outcome = client.send(_request())
        self.assertIsInstance(outcome, Success)
        record = ApiClient.decode(outcome, CodeSigningToken)
        self.assertEqual(record.model_dump(), {"token": "abc"})

    def test_decode_list_ignores_unknown_fields(self):
        """Validate scenario: list bodies decode and extra fields are ignored."""
        body = [{"id": 1, "name": "A", "value": "1", "extra": True}, {"id": 2, "name": "B", "value": "2"}]
        outcome = Success(200, response(200, body).content)
        entries = ApiClient.decode(outcome, KeyStoreEntry, many=True)
        self.assertEqual([e.name for e in entries], ["A", "B"])

    def test_decode_rejects_empty_and_malformed_bodies(self):
        """Validate scenario: decode failures raise DecodeError."""
        with self.assertRaises(DecodeError):
            ApiClient.decode(Success(204, b""), CodeSigningToken)
        with self.assertRaises(DecodeError):
            ApiClient.decode(Success(200, b'{not json'), CodeSigningToken)
        with self.assertRaises(DecodeError):
            ApiClient.decode(AuthFailure(), CodeSigningToken)

    def test_http_failures_are_classified(self):
        """Validate scenario: HTTP failures come back as values."""
        client = ApiClient(session=FakeSession(response(401), response(400, b"")))
        self.assertEqual(client.send(_request()), AuthFailure())
        self.assertEqual(client.send(_request(), "Server rejected the token."), ValidationFailure("Server rejected the token."))

    def test_network_errors_are_transport_failures(self):
        """Validate scenario: requests exceptions never escape send."""
        client = ApiClient(session=FakeSession(requests.ConnectionError("refused"), requests.Timeout()))
        self.assertIsInstance(client.send(_request()), TransportFailure)
        self.assertEqual(client.send(_request()), TransportFailure("The request timed out."))

    def test_unexpected_errors_are_transport_failures(self):
        """Validate scenario: non-requests exceptions are classified, not raised."""
        bad_header = UnicodeEncodeError("latin-1", "abc’def", 3, 4, "ordinal not in range(256)")
        client = ApiClient(session=FakeSession(bad_header, RuntimeError()))
        outcome = client.send(_request())
        self.assertIsInstance(outcome, TransportFailure)
        self.assertIn("latin-1", outcome.message)
        self.assertEqual(client.send(_request()), TransportFailure("RuntimeError"))

    def test_unexpected_error_after_cancel_is_cancelled(self):
        """Validate scenario: any failure after cancel stays silent."""
        token = CancelToken()

        class ClosingSession(FakeSession):
            def request(self, method, url, **kwargs):
                token.cancel()
                raise AttributeError("'NoneType' object has no attribute 'read'")

        client = ApiClient(session=ClosingSession(), token=token)
        self.assertEqual(client.send(_request()), Cancelled())

    def test_cancelled_client_does_not_send(self):
        """Validate scenario: a cancelled client returns Cancelled without I/O."""
        session = FakeSession(response(200))
        client = ApiClient(session=session)
        client.cancel()
        self.assertEqual(client.send(_request()), Cancelled())
        self.assertEqual(session.calls, [])
        self.assertTrue(session.closed)

    def test_error_after_cancel_is_cancelled(self):
        """Validate scenario: a failure caused by closing the session is silent."""
        token = CancelToken()

        class ClosingSession(FakeSession):
            def request(self, method, url, **kwargs):
                token.cancel()
                raise requests.ConnectionError("connection closed")

        client = ApiClient(session=ClosingSession(), token=token)
        self.assertEqual(client.send(_request()), Cancelled())

    def test_response_after_cancel_is_dropped(self):
        """Validate scenario: a response that lands after cancel is not classified."""
        token = CancelToken()

        class LateSession(FakeSession):
            def request(self, method, url, **kwargs):
                token.cancel()
                return response(500, b"boom")

        client = ApiClient(session=LateSession(), token=token)
        self.assertEqual(client.send(_request()), Cancelled())

    def test_cancel_token_raises_when_set(self):
        """Validate scenario: raise_if_cancelled only raises after cancel."""
        token = CancelToken()
        token.raise_if_cancelled()
        token.cancel()
        with self.assertRaises(RequestCancelled):
            token.raise_if_cancelled()

    def test_decode_generic_model(self):
        """Validate scenario: any pydantic model can be decoded."""

        class Ping(BaseModel):
            ok: bool

        self.assertTrue(ApiClient.decode(Success(200, b'{"ok": true}'), Ping).ok)


if __name__ == "__main__":
    unittest.main()
