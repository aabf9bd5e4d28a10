"""Random test assembly.

A test's question set is a dense ``1..K`` sequence of ``TestQuestion`` rows
owned by the test.  It is always replaced as a whole, never patched.
"""
from __future__ import annotations

import logging
import random
from decimal import Decimal
from typing import Sequence

from django.db import transaction

from questions.services import QuestionCriteria, candidate_ids

from ..exceptions import NoMatchingQuestions
from ..models import Test, TestQuestion
from .sampling import sample_ids

logger = logging.getLogger(__name__)

__all__ = [
    "QuestionCriteria",
    "apply_question_set",
    "assemble_test",
    "draw_questions",
    "regenerate_test",
    "replace_test_questions",
]


def draw_questions(
    criteria: QuestionCriteria, count: int, rng: random.Random | None = None
) -> list[int]:
    candidates = candidate_ids(criteria)
    if not candidates:
        raise NoMatchingQuestions()
    drawn = sample_ids(candidates, count, rng=rng)
    logger.debug(
        "Drew %s of %s candidate questions from bank %s", len(drawn), len(candidates), criteria.bank_id
    )
    return drawn


@transaction.atomic
def replace_test_questions(test: Test, question_ids: Sequence[int]) -> list[TestQuestion]:
    TestQuestion.objects.filter(test=test).delete()
    return TestQuestion.objects.bulk_create(
        [
            TestQuestion(test=test, question_id=question_id, order=position)
            for position, question_id in enumerate(question_ids, start=1)
        ]
    )


@transaction.atomic
def assemble_test(
    criteria: QuestionCriteria,
    count: int,
    *,
    name: str,
    description: str = "",
    duration_minutes: int = 60,
    pass_score: Decimal | int = Decimal("5"),
    created_by: str | None = None,
    rng: random.Random | None = None,
) -> Test:
    question_ids = draw_questions(criteria, count, rng=rng)
    test = Test.objects.create(
        name=name,
        description=description or "",
        duration_minutes=duration_minutes,
        pass_score=pass_score,
        is_randomized=True,
        created_by=created_by or "",
    )
    replace_test_questions(test, question_ids)
    return test


@transaction.atomic
def regenerate_test(
    test: Test, criteria: QuestionCriteria, count: int, rng: random.Random | None = None
) -> Test:
    return apply_question_set(test, draw_questions(criteria, count, rng=rng))


@transaction.atomic
def apply_question_set(test: Test, question_ids: Sequence[int]) -> Test:
    """Install an already drawn question set and mark the test randomized."""

    replace_test_questions(test, question_ids)
    if not test.is_randomized:
        test.is_randomized = True
        test.save(update_fields=["is_randomized", "updated_at"])
    return test
