"""Create, update and delete tests as one unit of work.

Each command validates its input first, then writes the test row, its
question links and its role assignments inside a single transaction.
Role notifications are dispatched with ``transaction.on_commit`` so they
only run once the change is durable, and their failures never reach the
caller.
"""
from __future__ import annotations

import logging
import random
from datetime import datetime
from decimal import Decimal
from functools import partial
from typing import Iterable, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone
from rest_framework import exceptions

from notifications.notifier import notify_roles

from ..exceptions import ConcurrencyConflict, PersistenceFailure, TestInUse
from ..models import Assignment, Test, TestQuestion
from .assembly import QuestionCriteria, apply_question_set, assemble_test, draw_questions
from .assignment import AssignmentSet, AssignmentWindow, set_role_assignments, validate_role_targets

logger = logging.getLogger(__name__)

LAST_WRITE_WINS = "last_write_wins"
OPTIMISTIC = "optimistic"
CONCURRENCY_MODES = (LAST_WRITE_WINS, OPTIMISTIC)


def concurrency_mode() -> str:
    mode = getattr(settings, "HRTEST_CONCURRENCY_MODE", LAST_WRITE_WINS)
    if mode not in CONCURRENCY_MODES:
        raise ValueError(f"Unsupported HRTEST_CONCURRENCY_MODE: {mode!r}")
    return mode


def _validate_count(count: Optional[int]) -> int:
    if count is None or count < 1:
        raise exceptions.ValidationError(
            {"question_count": ["Question count must be a positive integer."]}
        )
    return count


def _schedule_notification(test: Test, assignment_set: AssignmentSet, action: str) -> None:
    if not assignment_set.targets:
        return
    window = assignment_set.window
    level_id = assignment_set.targets[0].level_id
    transaction.on_commit(
        partial(
            notify_roles,
            test,
            assignment_set.role_names,
            level_id,
            window.start_at,
            window.end_at,
            action,
        )
    )


def create_test(
    *,
    criteria: QuestionCriteria,
    question_count: int,
    name: str,
    description: str = "",
    duration_minutes: int = 60,
    pass_score: Decimal | int = Decimal("5"),
    roles: Iterable[str] | None = None,
    level_id: Optional[int] = None,
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
    created_by: Optional[str] = None,
    rng: random.Random | None = None,
) -> Test:
    _validate_count(question_count)
    AssignmentWindow.build(start_at, end_at)
    role_names = validate_role_targets(roles, level_id)

    try:
        with transaction.atomic():
            test = assemble_test(
                criteria,
                question_count,
                name=name,
                description=description,
                duration_minutes=duration_minutes,
                pass_score=pass_score,
                created_by=created_by,
                rng=rng,
            )
            assignment_set = set_role_assignments(test, role_names, level_id, start_at, end_at)
            _schedule_notification(test, assignment_set, "created")
    except DatabaseError as exc:
        logger.exception("Creating test %r failed; nothing was saved", name)
        raise PersistenceFailure() from exc

    logger.info(
        "Test %s %r created by %s with %s questions",
        test.pk,
        test.name,
        created_by or "-",
        test.test_questions.count(),
    )
    return test


def _write_metadata(test: Test, expected_version: Optional[int], fields: dict) -> None:
    queryset = Test.objects.filter(pk=test.pk)
    if concurrency_mode() == OPTIMISTIC:
        queryset = queryset.filter(version=expected_version)
    updated = queryset.update(version=F("version") + 1, updated_at=timezone.now(), **fields)
    if not updated:
        logger.warning(
            "Rejected stale update of test %s (expected version %s)", test.pk, expected_version
        )
        raise ConcurrencyConflict()
    test.refresh_from_db()


def update_test(
    test: Test,
    *,
    name: str,
    description: str = "",
    duration_minutes: int = 60,
    pass_score: Decimal | int = Decimal("5"),
    roles: Iterable[str] | None = None,
    level_id: Optional[int] = None,
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
    regenerate_questions: bool = False,
    criteria: Optional[QuestionCriteria] = None,
    question_count: Optional[int] = None,
    expected_version: Optional[int] = None,
    rng: random.Random | None = None,
) -> Test:
    if concurrency_mode() == OPTIMISTIC and expected_version is None:
        raise exceptions.ValidationError({"version": ["This field is required."]})
    if regenerate_questions:
        if criteria is None:
            raise exceptions.ValidationError({"bank": ["Choose a question bank to regenerate from."]})
        _validate_count(question_count)
    AssignmentWindow.build(start_at, end_at)
    role_names = validate_role_targets(roles, level_id)
    question_ids = (
        draw_questions(criteria, question_count, rng=rng) if regenerate_questions else None
    )

    try:
        with transaction.atomic():
            _write_metadata(
                test,
                expected_version,
                {
                    "name": name,
                    "description": description or "",
                    "duration_minutes": duration_minutes,
                    "pass_score": pass_score,
                },
            )
            if question_ids is not None:
                apply_question_set(test, question_ids)
            assignment_set = set_role_assignments(test, role_names, level_id, start_at, end_at)
            _schedule_notification(test, assignment_set, "updated")
    except DatabaseError as exc:
        logger.exception("Updating test %s failed; changes were rolled back", test.pk)
        raise PersistenceFailure() from exc

    logger.info("Test %s updated to version %s", test.pk, test.version)
    return test


def delete_test(test: Test) -> None:
    if test.attempts.exists():
        raise TestInUse()
    test_id = test.pk
    try:
        with transaction.atomic():
            Assignment.objects.filter(test_id=test_id).delete()
            TestQuestion.objects.filter(test_id=test_id).delete()
            test.delete()
    except DatabaseError as exc:
        logger.exception("Deleting test %s failed", test_id)
        raise PersistenceFailure() from exc
    logger.info("Test %s deleted", test_id)
