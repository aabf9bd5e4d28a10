from django.contrib.auth import get_user_model
from django.test import TestCase


class HealthzTests(TestCase):
    def test_healthz(self):
        response = self.client.get("/healthz/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})


class RequestLoggingMiddlewareTests(TestCase):
    def test_generates_request_id(self):
        with self.assertLogs("hrtest.requests", level="INFO") as logs:
            response = self.client.get("/healthz/", {"probe": "1"})

        request_id = response["X-Request-ID"]
        self.assertEqual(len(request_id), 32)
        self.assertIn("[REQ] GET /healthz/?probe=1 | status=200", logs.output[0])
        self.assertIn(f"rid={request_id}", logs.output[0])
        self.assertIn("user=anonymous", logs.output[0])

    def test_echoes_incoming_request_id(self):
        user = get_user_model().objects.create_user(username="employee", password="pass")
        self.client.force_login(user)

        with self.assertLogs("hrtest.requests", level="INFO") as logs:
            response = self.client.get("/api/levels/", HTTP_X_REQUEST_ID="abc-123")

        self.assertEqual(response["X-Request-ID"], "abc-123")
        self.assertIn("user=employee", logs.output[0])
