"""Delivery backends for role-group notifications.

A channel receives ``send(group_keys, event_name, payload)`` where each group
key has the form ``role:{RoleName}``.  The active backend is the dotted path in
``settings.HRTEST_NOTIFICATION_CHANNEL``.
"""
from __future__ import annotations

import logging

import requests
from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils.module_loading import import_string

from .models import Notification

logger = logging.getLogger(__name__)

ROLE_GROUP_PREFIX = "role:"
DEFAULT_CHANNEL = "notifications.channels.InboxChannel"


class NotificationDeliveryFailure(Exception):
    pass


def role_group_key(role_name: str) -> str:
    return f"{ROLE_GROUP_PREFIX}{role_name}"


def role_from_group_key(group_key: str) -> str | None:
    if not group_key.startswith(ROLE_GROUP_PREFIX):
        return None
    return group_key[len(ROLE_GROUP_PREFIX):] or None


class BaseChannel:
    def send(self, group_keys: list[str], event_name: str, payload: dict) -> None:
        raise NotImplementedError


class NullChannel(BaseChannel):
    def send(self, group_keys, event_name, payload):
        logger.debug("Dropping %s for %s", event_name, group_keys)


class InboxChannel(BaseChannel):
    """Writes one inbox notification per member of each role group."""

    def send(self, group_keys, event_name, payload):
        user_model = get_user_model()
        title, content = _render(payload)
        created = 0
        for group_key in group_keys:
            role_name = role_from_group_key(group_key)
            if role_name is None:
                logger.warning("Ignoring unsupported group key %r", group_key)
                continue
            users = user_model.objects.filter(groups__name=role_name, is_active=True).distinct()
            rows = [
                Notification(user=user, title=title, content=content, payload=payload)
                for user in users
            ]
            created += len(Notification.objects.bulk_create(rows))
        logger.info("%s: stored %s inbox notifications for %s", event_name, created, group_keys)


class WebhookChannel(BaseChannel):
    """POSTs each message to a push gateway as JSON."""

    timeout = 10

    def __init__(self, url: str | None = None, token: str | None = None):
        self.url = url or getattr(settings, "HRTEST_NOTIFICATION_WEBHOOK_URL", None)
        self.token = token or getattr(settings, "HRTEST_NOTIFICATION_WEBHOOK_TOKEN", None)

    def send(self, group_keys, event_name, payload):
        if not self.url:
            raise NotificationDeliveryFailure("HRTEST_NOTIFICATION_WEBHOOK_URL is not configured")
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        body = {"groups": list(group_keys), "event": event_name, "payload": payload}
        try:
            response = requests.post(self.url, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NotificationDeliveryFailure(f"Webhook request failed: {exc}") from exc
        if not response.ok:
            raise NotificationDeliveryFailure(
                f"Webhook responded with HTTP {response.status_code}"
            )


def _render(payload: dict) -> tuple[str, str]:
    action = payload.get("type", "").rpartition(".")[2] or "updated"
    title = f"Test {action}: {payload.get('name', '')}".strip()
    window = payload.get("startAtUtc") or ""
    if payload.get("endAtUtc"):
        window = f"{window} - {payload['endAtUtc']}"
    level = payload.get("levelName") or payload.get("levelId")
    content = f"Level: {level}. Window (UTC): {window or 'open'}."
    return title, content


def get_channel(path: str | None = None) -> BaseChannel:
    path = path or getattr(settings, "HRTEST_NOTIFICATION_CHANNEL", None) or DEFAULT_CHANNEL
    return import_string(path)()
