"""Lookups over roles (auth groups) and levels.

Assignments target a role name plus a level id.  This module is the only
place that knows roles are stored as ``django.contrib.auth`` groups.
"""
from __future__ import annotations

from typing import Iterable

from django.conf import settings
from django.contrib.auth.models import Group

from .models import Level


def admin_role_name() -> str:
    return getattr(settings, "HRTEST_ADMIN_ROLE", "Admin")


def assignable_roles():
    return Group.objects.exclude(name=admin_role_name()).order_by("name")


def assignable_role_names() -> list[str]:
    return list(assignable_roles().values_list("name", flat=True))


def unknown_roles(roles: Iterable[str]) -> list[str]:
    """Return the names in ``roles`` that are not assignable roles."""

    requested = list(dict.fromkeys(roles))
    known = set(assignable_roles().filter(name__in=requested).values_list("name", flat=True))
    return [name for name in requested if name not in known]


def role_names_for(user) -> list[str]:
    if user is None or not user.is_authenticated:
        return []
    return list(user.groups.order_by("name").values_list("name", flat=True))


def level_exists(level_id: int | None) -> bool:
    if level_id is None:
        return False
    return Level.objects.filter(pk=level_id).exists()


def get_level_name(level_id: int | None) -> str | None:
    if level_id is None:
        return None
    return Level.objects.filter(pk=level_id).values_list("name", flat=True).first()


def level_names(level_ids: Iterable[int]) -> dict[int, str]:
    return dict(Level.objects.filter(pk__in=set(level_ids)).values_list("id", "name"))


def level_id_for(user) -> int | None:
    profile = getattr(user, "employee_profile", None)
    return profile.level_id if profile is not None else None
