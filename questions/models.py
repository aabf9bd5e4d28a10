from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from skills.models import Skill


class QuestionBank(models.Model):
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    skill = models.ForeignKey(
        Skill,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="question_banks",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Question(models.Model):
    class Type(models.IntegerChoices):
        MCQ = 0, "Multiple choice"
        ESSAY = 1, "Essay"
        TRUE_FALSE = 2, "True/False"
        DRAG_DROP = 3, "Drag and drop"
        MATCHING = 4, "Matching"

    class Difficulty(models.IntegerChoices):
        INTERN = 0, "Intern"
        FRESHER = 1, "Fresher"
        JUNIOR = 2, "Junior"
        MIDDLE = 3, "Middle"
        SENIOR = 4, "Senior"
        LEAD = 5, "Lead"
        MANAGER = 6, "Manager"

    bank = models.ForeignKey(
        QuestionBank, on_delete=models.PROTECT, related_name="questions"
    )
    skill = models.ForeignKey(
        Skill,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="questions",
    )
    content = models.TextField()
    type = models.PositiveSmallIntegerField(choices=Type.choices, default=Type.MCQ)
    difficulty = models.PositiveSmallIntegerField(
        choices=Difficulty.choices, default=Difficulty.INTERN
    )
    options = models.JSONField(null=True, blank=True)
    correct_answer = models.JSONField(null=True, blank=True)
    score = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[MinValueValidator(Decimal("0.01")), MaxValueValidator(Decimal("1000"))],
    )

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["bank", "type", "difficulty"], name="question_bank_filter_idx"),
        ]

    def __str__(self) -> str:
        preview = self.content if len(self.content) <= 60 else f"{self.content[:57]}..."
        return f"#{self.pk} {preview}"
