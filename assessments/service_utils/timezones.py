"""Conversion between caller-local wall time and stored UTC."""
from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from django.conf import settings


@lru_cache(maxsize=None)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def display_zone() -> ZoneInfo:
    return _zone(getattr(settings, "HRTEST_DISPLAY_TIME_ZONE", "UTC"))


def to_utc(value: datetime | None, tz: ZoneInfo | None = None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime.

    Naive values are wall-clock times in ``tz`` (the display zone by default);
    aware values are converted as-is.
    """

    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        value = value.replace(tzinfo=tz or display_zone())
    return value.astimezone(dt_timezone.utc)


def to_local(value: datetime | None, tz: ZoneInfo | None = None) -> datetime | None:
    """Return a naive wall-clock datetime in ``tz`` for a stored value."""

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt_timezone.utc)
    return value.astimezone(tz or display_zone()).replace(tzinfo=None)
