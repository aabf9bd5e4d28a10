from datetime import datetime, timezone as dt_timezone
from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.test import TestCase, override_settings

from accounts.models import Level
from assessments.tests import factories
from .channels import (
    InboxChannel,
    NotificationDeliveryFailure,
    NullChannel,
    WebhookChannel,
    get_channel,
    role_from_group_key,
    role_group_key,
)
from .models import Notification
from .notifier import EVENT_NAME, build_payload, notify_roles


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


class NotifyRolesTests(TestCase):
    def setUp(self):
        self.level = Level.objects.get(name="Senior")
        self.test = factories.create_assessment(name="Backend screening")
        self.channel = mock.Mock()

    def test_one_group_per_distinct_role(self):
        delivered = notify_roles(
            self.test, ["Dev", "QA", "Dev"], self.level.pk, utc(2024, 1, 15, 2, 30), None,
            "created", channel=self.channel,
        )

        self.assertTrue(delivered)
        group_keys, event_name, payload = self.channel.send.call_args.args
        self.assertEqual(group_keys, ["role:Dev", "role:QA"])
        self.assertEqual(event_name, EVENT_NAME)
        self.assertEqual(
            payload,
            {
                "type": "test.created",
                "testId": self.test.pk,
                "name": "Backend screening",
                "levelId": self.level.pk,
                "levelName": "Senior",
                "startAtUtc": "2024-01-15T02:30:00Z",
                "endAtUtc": None,
            },
        )

    def test_no_roles_sends_nothing(self):
        self.assertTrue(notify_roles(self.test, [], self.level.pk, None, None, "updated", channel=self.channel))
        self.channel.send.assert_not_called()

    def test_unknown_action_is_rejected(self):
        with self.assertRaises(ValueError):
            notify_roles(self.test, ["Dev"], self.level.pk, None, None, "deleted", channel=self.channel)

    def test_delivery_failure_is_logged_and_swallowed(self):
        self.channel.send.side_effect = NotificationDeliveryFailure("gateway down")

        with self.assertLogs("notifications.notifier", level="ERROR") as logs:
            delivered = notify_roles(
                self.test, ["Dev"], self.level.pk, utc(2024, 1, 1, 0, 0), None, "updated",
                channel=self.channel,
            )

        self.assertFalse(delivered)
        self.assertIn("was not delivered", logs.output[0])
        self.channel.send.assert_called_once()

    def test_payload_uses_utc_strings(self):
        payload = build_payload(
            self.test, self.level.pk, utc(2024, 3, 1, 8, 0), utc(2024, 3, 2, 8, 0), "updated"
        )
        self.assertEqual(payload["type"], "test.updated")
        self.assertEqual(payload["endAtUtc"], "2024-03-02T08:00:00Z")


class ChannelTests(TestCase):
    def test_group_keys(self):
        self.assertEqual(role_group_key("Dev"), "role:Dev")
        self.assertEqual(role_from_group_key("role:Dev"), "Dev")
        self.assertIsNone(role_from_group_key("dept:Engineering"))

    def test_inbox_writes_one_notification_per_role_member(self):
        dev = Group.objects.create(name="Dev")
        user_model = get_user_model()
        first = user_model.objects.create_user(username="first", password="pass")
        second = user_model.objects.create_user(username="second", password="pass")
        user_model.objects.create_user(username="outsider", password="pass")
        first.groups.add(dev)
        second.groups.add(dev)

        InboxChannel().send(
            ["role:Dev", "role:Nobody"],
            EVENT_NAME,
            {"type": "test.created", "name": "Backend screening", "levelName": "Junior"},
        )

        notifications = Notification.objects.order_by("user__username")
        self.assertEqual([n.user.username for n in notifications], ["first", "second"])
        self.assertEqual(notifications[0].title, "Test created: Backend screening")
        self.assertEqual(notifications[0].payload["levelName"], "Junior")

    def test_webhook_posts_json(self):
        with mock.patch("notifications.channels.requests.post") as post:
            post.return_value.ok = True
            WebhookChannel(url="https://push.example.test/hook", token="secret").send(
                ["role:Dev"], EVENT_NAME, {"type": "test.created"}
            )

        post.assert_called_once_with(
            "https://push.example.test/hook",
            json={"groups": ["role:Dev"], "event": EVENT_NAME, "payload": {"type": "test.created"}},
            headers={"Authorization": "Bearer secret"},
            timeout=10,
        )

    def test_webhook_error_status_raises(self):
        with mock.patch("notifications.channels.requests.post") as post:
            post.return_value.ok = False
            post.return_value.status_code = 502
            with self.assertRaises(NotificationDeliveryFailure):
                WebhookChannel(url="https://push.example.test/hook").send(["role:Dev"], EVENT_NAME, {})

    def test_webhook_connection_error_raises(self):
        with mock.patch(
            "notifications.channels.requests.post", side_effect=requests.Timeout("slow")
        ):
            with self.assertRaises(NotificationDeliveryFailure):
                WebhookChannel(url="https://push.example.test/hook").send(["role:Dev"], EVENT_NAME, {})

    @override_settings(HRTEST_NOTIFICATION_WEBHOOK_URL=None)
    def test_webhook_without_url_raises(self):
        with self.assertRaises(NotificationDeliveryFailure):
            WebhookChannel().send(["role:Dev"], EVENT_NAME, {})

    @override_settings(HRTEST_NOTIFICATION_CHANNEL="notifications.channels.NullChannel")
    def test_channel_is_loaded_from_settings(self):
        self.assertIsInstance(get_channel(), NullChannel)


class NotificationApiTests(TestCase):
    def setUp(self):
        user_model = get_user_model()
        self.user = user_model.objects.create_user(username="employee", password="pass")
        self.other = user_model.objects.create_user(username="other", password="pass")
        self.mine = Notification.objects.create(user=self.user, title="Test created: A")
        Notification.objects.create(user=self.other, title="Test created: B")
        self.client.force_login(self.user)

    def test_lists_only_own_notifications(self):
        response = self.client.get("/api/notifications/")

        self.assertEqual(response.status_code, 200)
        results = response.json()["results"]
        self.assertEqual([item["id"] for item in results], [self.mine.id])

    def test_mark_read(self):
        response = self.client.post(f"/api/notifications/{self.mine.id}/read/")

        self.assertEqual(response.status_code, 200)
        self.mine.refresh_from_db()
        self.assertTrue(self.mine.is_read)
        unread = self.client.get("/api/notifications/", {"unread": "1"}).json()
        self.assertEqual(unread["count"], 0)

    def test_cannot_mark_someone_elses_notification(self):
        foreign = Notification.objects.get(user=self.other)
        response = self.client.post(f"/api/notifications/{foreign.id}/read/")
        self.assertEqual(response.status_code, 404)
