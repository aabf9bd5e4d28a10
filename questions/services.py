"""Query helpers for the question repository.

The test assembler only needs question ids for a set of filters; everything
else about questions (content, options, grading) stays here.
"""
from __future__ import annotations

from dataclasses import dataclass

from django.db import transaction
from django.db.models import Count, Q, QuerySet
from rest_framework import exceptions

from .models import Question, QuestionBank


@dataclass(frozen=True)
class QuestionCriteria:
    """Filters used to pick candidate questions for a test."""

    bank_id: int
    skill_id: int | None = None
    type: int | None = None
    difficulty: int | None = None


def filter_questions(criteria: QuestionCriteria) -> QuerySet[Question]:
    queryset = Question.objects.filter(bank_id=criteria.bank_id)
    if criteria.skill_id is not None:
        queryset = queryset.filter(skill_id=criteria.skill_id)
    if criteria.type is not None:
        queryset = queryset.filter(type=criteria.type)
    if criteria.difficulty is not None:
        queryset = queryset.filter(difficulty=criteria.difficulty)
    return queryset


def candidate_ids(criteria: QuestionCriteria) -> list[int]:
    """Return ids of every question matching ``criteria`` in a stable order."""

    return list(filter_questions(criteria).order_by("id").values_list("id", flat=True))


def search_questions(
    *,
    term: str | None = None,
    bank_id: int | None = None,
    skill_id: int | None = None,
    type: int | None = None,
    difficulty: int | None = None,
) -> QuerySet[Question]:
    queryset = Question.objects.select_related("bank", "skill")
    if term:
        queryset = queryset.filter(content__icontains=term.strip())
    if bank_id is not None:
        queryset = queryset.filter(bank_id=bank_id)
    if skill_id is not None:
        queryset = queryset.filter(skill_id=skill_id)
    if type is not None:
        queryset = queryset.filter(type=type)
    if difficulty is not None:
        queryset = queryset.filter(difficulty=difficulty)
    return queryset.order_by("id")


def search_banks(*, term: str | None = None, skill_id: int | None = None) -> QuerySet[QuestionBank]:
    """Banks with a ``question_count`` annotation.

    Filtering by skill matches banks that hold at least one question tagged
    with that skill, not only banks tagged with it.
    """

    queryset = QuestionBank.objects.select_related("skill").annotate(
        question_count=Count("questions", distinct=True)
    )
    if skill_id is not None:
        bank_ids = Question.objects.filter(skill_id=skill_id).values("bank_id")
        queryset = queryset.filter(pk__in=bank_ids)
    if term:
        term = term.strip()
        queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
    return queryset.order_by("name")


@transaction.atomic
def delete_bank(bank: QuestionBank) -> None:
    if bank.questions.exists():
        raise exceptions.ValidationError(
            {"bank": ["The bank still contains questions and cannot be deleted."]}
        )
    bank.delete()


def delete_question(question: Question) -> None:
    if question.test_links.exists():
        raise exceptions.ValidationError(
            {"question": ["The question is used by a test and cannot be deleted."]}
        )
    if question.answers.exists():
        raise exceptions.ValidationError(
            {"question": ["The question has recorded answers and cannot be deleted."]}
        )
    question.delete()
