"""Time-scoped role/level assignments of tests.

Role assignments of a test are owned by the test and replaced as a whole:
every call to :func:`set_role_assignments` deletes the previous role rows and
inserts the new set with one shared window.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from accounts import directory

from ..exceptions import InvalidAssignmentTarget, InvalidTimeRange
from ..models import Assignment, Test
from .targets import TargetDescriptor, parse_role_target
from .timezones import to_local, to_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentWindow:
    start_at: datetime
    end_at: Optional[datetime] = None

    @classmethod
    def build(
        cls,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        now: datetime | None = None,
    ) -> "AssignmentWindow":
        """Normalise caller input to UTC; a missing start means ``now``."""

        start = to_utc(start_at) if start_at is not None else (now or timezone.now())
        end = to_utc(end_at)
        if end is not None and start > end:
            raise InvalidTimeRange()
        return cls(start_at=start, end_at=end)


@dataclass
class AssignmentSet:
    test_id: int
    targets: List[TargetDescriptor]
    window: Optional[AssignmentWindow]
    assignments: List[Assignment] = field(default_factory=list)

    @property
    def role_names(self) -> list[str]:
        return [target.role_name for target in self.targets]


@dataclass(frozen=True)
class RoleAssignmentView:
    id: int
    target: TargetDescriptor
    level_name: Optional[str]
    start_at: datetime
    end_at: Optional[datetime]
    start_at_local: datetime
    end_at_local: Optional[datetime]
    is_active: bool


def normalize_roles(roles: Iterable[str] | None) -> list[str]:
    cleaned = ((role or "").strip() for role in (roles or ()))
    return list(dict.fromkeys(role for role in cleaned if role))


def validate_role_targets(roles: Iterable[str] | None, level_id: int | None) -> list[str]:
    """Check roles and level against the directory and return distinct role names."""

    names = normalize_roles(roles)
    if not names:
        return names
    if level_id is None:
        raise InvalidAssignmentTarget("level", "A level is required when roles are selected.")
    if not directory.level_exists(level_id):
        raise InvalidAssignmentTarget("level", f"Unknown level: {level_id}.")
    unknown = directory.unknown_roles(names)
    if unknown:
        raise InvalidAssignmentTarget("roles", f"Unknown roles: {', '.join(unknown)}.")
    return names


@transaction.atomic
def set_role_assignments(
    test: Test,
    roles: Iterable[str] | None,
    level_id: int | None,
    start_at: datetime | None = None,
    end_at: datetime | None = None,
) -> AssignmentSet:
    names = validate_role_targets(roles, level_id)
    window = AssignmentWindow.build(start_at, end_at) if names else None

    deleted, _ = Assignment.objects.filter(
        test=test, target_type=Assignment.TargetType.ROLE
    ).delete()
    if not names:
        logger.info("Cleared %s role assignments of test %s", deleted, test.pk)
        return AssignmentSet(test_id=test.pk, targets=[], window=None)

    targets = [TargetDescriptor.for_role(name, level_id) for name in names]
    created = Assignment.objects.bulk_create(
        [
            Assignment(
                test=test,
                target_type=Assignment.TargetType.ROLE,
                target_value=target.encode(),
                start_at=window.start_at,
                end_at=window.end_at,
                is_active=True,
            )
            for target in targets
        ]
    )
    logger.info(
        "Assigned test %s to roles %s at level %s (%s..%s)",
        test.pk,
        names,
        level_id,
        window.start_at.isoformat(),
        window.end_at.isoformat() if window.end_at else "open",
    )
    return AssignmentSet(test_id=test.pk, targets=targets, window=window, assignments=created)


def role_assignments_for(test: Test) -> list[RoleAssignmentView]:
    rows = list(
        Assignment.objects.filter(test=test, target_type=Assignment.TargetType.ROLE).order_by("id")
    )
    parsed = []
    for row in rows:
        target = parse_role_target(row.target_value)
        if target is None:
            logger.warning("Skipping malformed role target %r on assignment %s", row.target_value, row.pk)
            continue
        parsed.append((row, target))

    names = directory.level_names(target.level_id for _, target in parsed)
    return [
        RoleAssignmentView(
            id=row.pk,
            target=target,
            level_name=names.get(target.level_id),
            start_at=row.start_at,
            end_at=row.end_at,
            start_at_local=to_local(row.start_at),
            end_at_local=to_local(row.end_at),
            is_active=row.is_active,
        )
        for row, target in parsed
    ]


def active_tests_for(user, now: datetime | None = None) -> QuerySet[Test]:
    """Tests assigned to one of ``user``'s roles at the user's level right now."""

    level_id = directory.level_id_for(user)
    roles = directory.role_names_for(user)
    if level_id is None or not roles:
        return Test.objects.none()

    now = now or timezone.now()
    values = [TargetDescriptor.for_role(role, level_id).encode() for role in roles]
    assigned = Assignment.objects.filter(
        target_type=Assignment.TargetType.ROLE,
        target_value__in=values,
        is_active=True,
        start_at__lte=now,
    ).filter(Q(end_at__isnull=True) | Q(end_at__gte=now))
    return Test.objects.filter(pk__in=assigned.values("test_id")).order_by("-id")
