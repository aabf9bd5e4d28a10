from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from questions.models import Question


class Test(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(
        default=60,
        validators=[MinValueValidator(1), MaxValueValidator(1000)],
    )
    pass_score = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("5.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1000"))],
    )
    is_randomized = models.BooleanField(default=False)
    created_by = models.CharField(max_length=150, blank=True)
    version = models.PositiveIntegerField(
        default=1,
        help_text="Incremented on every update; checked in optimistic concurrency mode.",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-id"]

    def __str__(self) -> str:
        return self.name


class TestQuestion(models.Model):
    """Position of a question inside a test's fixed question sequence."""

    test = models.ForeignKey(Test, on_delete=models.CASCADE, related_name="test_questions")
    question = models.ForeignKey(
        Question, on_delete=models.PROTECT, related_name="test_links"
    )
    order = models.PositiveIntegerField()

    class Meta:
        ordering = ["test", "order"]
        constraints = [
            models.UniqueConstraint(fields=["test", "order"], name="test_question_order_unique"),
            models.UniqueConstraint(fields=["test", "question"], name="test_question_unique"),
            models.CheckConstraint(condition=models.Q(order__gte=1), name="test_question_order_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.test_id}#{self.order} -> {self.question_id}"


class Assignment(models.Model):
    class TargetType(models.TextChoices):
        DEPARTMENT = "Department", "Department"
        ROLE = "Role", "Role"
        LEVEL = "Level", "Level"
        USER = "User", "User"

    test = models.ForeignKey(Test, on_delete=models.CASCADE, related_name="assignments")
    target_type = models.CharField(
        max_length=20, choices=TargetType.choices, default=TargetType.DEPARTMENT
    )
    target_value = models.CharField(
        max_length=255,
        help_text='For role targets: "{role}|{level_id}".',
    )
    start_at = models.DateTimeField(default=timezone.now)
    end_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["test", "id"]
        indexes = [
            models.Index(
                fields=["test", "target_type", "target_value"], name="assignment_target_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_at__isnull=True) | models.Q(start_at__lte=models.F("end_at")),
                name="assignment_window_ordered",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.test} -> {self.target_type}:{self.target_value}"


class TestAttempt(models.Model):
    class Status(models.TextChoices):
        DRAFT = "Draft", "Draft"
        SUBMITTED = "Submitted", "Submitted"
        GRADED = "Graded", "Graded"

    test = models.ForeignKey(Test, on_delete=models.CASCADE, related_name="attempts")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="test_attempts"
    )
    started_at = models.DateTimeField(default=timezone.now)
    submitted_at = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.DRAFT)
    total_score = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    class Meta:
        ordering = ["-started_at"]
        indexes = [models.Index(fields=["test", "user"], name="attempt_test_user_idx")]

    def __str__(self) -> str:  # pragma: no cover - representation only
        return f"{self.user} @ {self.test} ({self.status})"


class Answer(models.Model):
    attempt = models.ForeignKey(TestAttempt, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="answers")
    answer = models.JSONField(null=True, blank=True)
    score = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    graded_by = models.CharField(max_length=150, blank=True)
    graded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=["attempt", "question"], name="answer_attempt_question_idx")]

    def __str__(self) -> str:  # pragma: no cover - representation only
        return f"Answer {self.question_id} in attempt {self.attempt_id}"
