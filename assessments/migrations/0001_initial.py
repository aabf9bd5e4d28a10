from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("questions", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Test",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "duration_minutes",
                    models.PositiveIntegerField(
                        default=60,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(1000),
                        ],
                    ),
                ),
                (
                    "pass_score",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("5.00"),
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("1000")),
                        ],
                    ),
                ),
                ("is_randomized", models.BooleanField(default=False)),
                ("created_by", models.CharField(blank=True, max_length=150)),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Incremented on every update; checked in optimistic concurrency mode.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-id"],
            },
        ),
        migrations.CreateModel(
            name="TestQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order", models.PositiveIntegerField()),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="test_links",
                        to="questions.question",
                    ),
                ),
                (
                    "test",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="test_questions",
                        to="assessments.test",
                    ),
                ),
            ],
            options={
                "ordering": ["test", "order"],
                "constraints": [
                    models.UniqueConstraint(fields=("test", "order"), name="test_question_order_unique"),
                    models.UniqueConstraint(fields=("test", "question"), name="test_question_unique"),
                    models.CheckConstraint(condition=models.Q(order__gte=1), name="test_question_order_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Assignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "target_type",
                    models.CharField(
                        choices=[
                            ("Department", "Department"),
                            ("Role", "Role"),
                            ("Level", "Level"),
                            ("User", "User"),
                        ],
                        default="Department",
                        max_length=20,
                    ),
                ),
                (
                    "target_value",
                    models.CharField(help_text='For role targets: "{role}|{level_id}".', max_length=255),
                ),
                ("start_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("end_at", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "test",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="assessments.test",
                    ),
                ),
            ],
            options={
                "ordering": ["test", "id"],
                "indexes": [
                    models.Index(fields=["test", "target_type", "target_value"], name="assignment_target_idx")
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_at__isnull", True), ("start_at__lte", models.F("end_at")), _connector="OR"),
                        name="assignment_window_ordered",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TestAttempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("Draft", "Draft"), ("Submitted", "Submitted"), ("Graded", "Graded")],
                        default="Draft",
                        max_length=16,
                    ),
                ),
                ("total_score", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                (
                    "test",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attempts",
                        to="assessments.test",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="test_attempts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-started_at"],
                "indexes": [models.Index(fields=["test", "user"], name="attempt_test_user_idx")],
            },
        ),
        migrations.CreateModel(
            name="Answer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("answer", models.JSONField(blank=True, null=True)),
                ("score", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("graded_by", models.CharField(blank=True, max_length=150)),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                (
                    "attempt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answers",
                        to="assessments.testattempt",
                    ),
                ),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="answers",
                        to="questions.question",
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["attempt", "question"], name="answer_attempt_question_idx")],
            },
        ),
    ]
