import asyncio, unittest
from unittest.mock import patch
from fastapi.testclient import TestClient
from gmail_inbox import Attachment, ConnectionStatus, MessagePage, NormalizedMessage, UpstreamApiError
from gmail_inbox.app import app, get_platform
from gmail_inbox.errors import AuthenticationError

def on_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True

class FakePlatform:
    def __init__(self, user=None, me_error=None):
        self.user = user
        self.me_error = me_error
        self.token_requests = []
        self.ran_on_loop = {}

    def me(self):
        self.ran_on_loop["me"] = on_event_loop()
        if self.me_error is not None:
            raise self.me_error
        return self.user

    def get_access_token(self, integration):
        self.ran_on_loop["token"] = on_event_loop()
        self.token_requests.append(integration)
        return "gmail-token"


def sample_page() -> MessagePage:
    return MessagePage(
        messages=[NormalizedMessage(
            gmail_id="a",
            thread_id="t",
            subject="Visita",
            from_email="ana@example.com",
            from_name="Ana",
            to_email="agente@example.com",
            snippet="Olá",
            body="Olá, confirmo a visita.",
            received_date="2023-11-14T22:13:20.000Z",
            labels=["INBOX"],
            attachments=[Attachment(filename="planta.pdf", mime_type="application/pdf", size=10)],
        )],
        next_page_token="NEXT",
    )


class AppTestCase(unittest.TestCase):
    user = {"id": "u1", "email": "agente@example.com"}

    def setUp(self):
        self.platform = FakePlatform(user=self.user)
        app.dependency_overrides[get_platform] = lambda: self.platform
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()


class TestFetchGmailMessages(AppTestCase):
    def test_unauthenticated_returns_401_without_gmail_call(self):
        self.platform.user = None
        with patch("gmail_inbox.app.fetch_page") as fetch:
            r = self.client.post("/functions/fetchGmailMessages", json={})
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json(), {"error": "Unauthorized"})
        fetch.assert_not_called()
        self.assertEqual(self.platform.token_requests, [])

    def test_rejected_session_returns_401(self):
        self.platform.me_error = AuthenticationError("Unauthorized")
        with patch("gmail_inbox.app.fetch_page") as fetch:
            r = self.client.post("/functions/fetchGmailMessages", json={})
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json(), {"error": "Unauthorized"})
        fetch.assert_not_called()

    def test_success(self):
        with patch("gmail_inbox.app.fetch_page", return_value=sample_page()) as fetch:
            r = self.client.post(
                "/functions/fetchGmailMessages",
                json={"maxResults": 20, "query": "in:inbox", "pageToken": "P1"},
            )
        self.assertEqual(r.status_code, 200)
        fetch.assert_called_once_with("gmail-token", 20, "in:inbox", "P1")
        self.assertEqual(self.platform.token_requests, ["gmail"])
        body = r.json()
        self.assertEqual(body["nextPageToken"], "NEXT")
        self.assertEqual(body["messages"][0]["gmail_id"], "a")
        self.assertTrue(body["messages"][0]["has_attachments"])
        self.assertEqual(body["messages"][0]["attachments"],
                         [{"filename": "planta.pdf", "mimeType": "application/pdf", "size": 10}])

    def test_platform_calls_run_off_the_event_loop(self):
        with patch("gmail_inbox.app.fetch_page", return_value=MessagePage()):
            r = self.client.post("/functions/fetchGmailMessages", json={})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(self.platform.ran_on_loop, {"me": False, "token": False})

    def test_defaults_when_body_empty(self):
        with patch("gmail_inbox.app.fetch_page", return_value=MessagePage()) as fetch:
            r = self.client.post("/functions/fetchGmailMessages")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"messages": [], "nextPageToken": None})
        fetch.assert_called_once_with("gmail-token", 50, "", None)

    def test_upstream_error_returns_500(self):
        error = UpstreamApiError(403, "Insufficient Permission")
        with patch("gmail_inbox.app.fetch_page", side_effect=error):
            r = self.client.post("/functions/fetchGmailMessages", json={})
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"error": "Gmail API error: 403 Insufficient Permission"})

    def test_unexpected_error_returns_500(self):
        with patch("gmail_inbox.app.fetch_page", side_effect=ValueError("boom")):
            r = self.client.post("/functions/fetchGmailMessages", json={})
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"error": "boom"})


class TestGetGmailMessage(AppTestCase):
    def test_requires_message_id(self):
        r = self.client.post("/functions/getGmailMessage", json={})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"error": "Missing required field: messageId"})

    def test_returns_message(self):
        message = sample_page().messages[0]
        with patch("gmail_inbox.app.get_message", return_value=message) as get:
            r = self.client.post("/functions/getGmailMessage", json={"messageId": "a"})
        self.assertEqual(r.status_code, 200)
        get.assert_called_once_with("gmail-token", "a")
        self.assertEqual(r.json()["body"], "Olá, confirmo a visita.")

    def test_unauthenticated(self):
        self.platform.user = None
        r = self.client.post("/functions/getGmailMessage", json={"messageId": "a"})
        self.assertEqual(r.status_code, 401)


class TestCheckGmailConnection(AppTestCase):
    def test_reports_status(self):
        status = ConnectionStatus(connected=True, email="agente@example.com", messages_total=3, threads_total=2)
        with patch("gmail_inbox.app.check_connection", return_value=status):
            r = self.client.post("/functions/checkGmailConnection")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {
            "connected": True, "email": "agente@example.com", "messagesTotal": 3, "threadsTotal": 2,
        })

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

if __name__ == "__main__":
    unittest.main()
