"""Post-commit fan-out of test assignment changes to role groups."""
from __future__ import annotations

import logging
from datetime import datetime, timezone as dt_timezone
from typing import Iterable

from accounts.directory import get_level_name

from .channels import BaseChannel, get_channel, role_group_key

logger = logging.getLogger(__name__)

EVENT_NAME = "Notify"
ACTIONS = ("created", "updated")


def _iso_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt_timezone.utc)
    return value.astimezone(dt_timezone.utc).isoformat().replace("+00:00", "Z")


def build_payload(test, level_id, start_at, end_at, action: str) -> dict:
    return {
        "type": f"test.{action}",
        "testId": test.pk,
        "name": test.name,
        "levelId": level_id,
        "levelName": get_level_name(level_id),
        "startAtUtc": _iso_utc(start_at),
        "endAtUtc": _iso_utc(end_at),
    }


def notify_roles(
    test,
    roles: Iterable[str],
    level_id: int | None,
    start_at: datetime | None,
    end_at: datetime | None,
    action: str,
    channel: BaseChannel | None = None,
) -> bool:
    """Send one ``Notify`` message per distinct role group.

    Must only be called after the assignment change has committed.  Delivery
    failures are logged and reported through the return value.
    """

    if action not in ACTIONS:
        raise ValueError(f"Unknown notification action: {action!r}")
    group_keys = [role_group_key(role) for role in dict.fromkeys(roles)]
    if not group_keys:
        return True

    try:
        payload = build_payload(test, level_id, start_at, end_at, action)
        (channel or get_channel()).send(group_keys, EVENT_NAME, payload)
    except Exception:
        logger.exception(
            "Notification for test %s (%s) to %s was not delivered", test.pk, action, group_keys
        )
        return False
    logger.info("Notified %s about test %s (%s)", group_keys, test.pk, action)
    return True
