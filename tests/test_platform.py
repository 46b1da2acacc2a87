import unittest
from unittest.mock import Mock, patch
import requests
from gmail_inbox.errors import AuthenticationError, PlatformError
from gmail_inbox.platform import PlatformClient

def response(status_code=200, payload=None, text=""):
    return Mock(status_code=status_code, json=Mock(return_value=payload), text=text)

class TestPlatformClient(unittest.TestCase):
    def client(self, authorization="Bearer user-jwt"):
        return PlatformClient(
            authorization,
            base_url="https://platform.test/api",
            app_id="app-1",
            service_token="service-key",
            timeout=5,
        )

    def test_me_without_session_makes_no_request(self):
        with patch("gmail_inbox.platform.requests.get") as get:
            self.assertIsNone(self.client(authorization=None).me())
        get.assert_not_called()

    def test_me_returns_user(self):
        with patch("gmail_inbox.platform.requests.get", return_value=response(payload={"id": "u1"})) as get:
            self.assertEqual(self.client().me(), {"id": "u1"})
        url = get.call_args.args[0]
        headers = get.call_args.kwargs["headers"]
        self.assertEqual(url, "https://platform.test/api/apps/app-1/entities/User/me")
        self.assertEqual(headers["Authorization"], "Bearer user-jwt")
        self.assertEqual(get.call_args.kwargs["timeout"], 5)

    def test_me_rejected_token(self):
        with patch("gmail_inbox.platform.requests.get", return_value=response(401)):
            with self.assertRaises(AuthenticationError):
                self.client().me()

    def test_me_server_error(self):
        with patch("gmail_inbox.platform.requests.get", return_value=response(502, text="bad gateway")):
            with self.assertRaises(PlatformError):
                self.client().me()

    def test_access_token_uses_service_credential(self):
        with patch("gmail_inbox.platform.requests.get", return_value=response(payload={"access_token": "ya29.x"})) as get:
            self.assertEqual(self.client().get_access_token("gmail"), "ya29.x")
        self.assertEqual(get.call_args.args[0], "https://platform.test/api/apps/app-1/external-auth/tokens/gmail")
        self.assertEqual(get.call_args.kwargs["headers"]["Authorization"], "Bearer service-key")

    def test_access_token_missing(self):
        with patch("gmail_inbox.platform.requests.get", return_value=response(payload={})):
            with self.assertRaises(PlatformError):
                self.client().get_access_token("gmail")

    def test_network_failure(self):
        with patch("gmail_inbox.platform.requests.get", side_effect=requests.exceptions.ConnectionError("down")):
            with self.assertRaises(PlatformError):
                self.client().get_access_token("gmail")

if __name__ == "__main__":
    unittest.main()
