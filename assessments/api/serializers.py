from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from questions.models import Question, QuestionBank
from skills.models import Skill

from ..models import Test, TestQuestion
from ..service_utils.assembly import QuestionCriteria
from ..service_utils.assignment import role_assignments_for
from ..service_utils.timezones import display_zone

MAX_QUESTION_COUNT = 500


class LocalDateTimeField(serializers.DateTimeField):
    """Reads naive input and renders output in the display time zone."""

    def default_timezone(self):
        return display_zone()


class TestSummarySerializer(serializers.ModelSerializer):
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = Test
        fields = [
            "id",
            "name",
            "description",
            "duration_minutes",
            "pass_score",
            "is_randomized",
            "created_by",
            "version",
            "question_count",
            "created_at",
            "updated_at",
        ]

    def get_question_count(self, obj: Test) -> int:
        annotated = getattr(obj, "question_count", None)
        if annotated is not None:
            return annotated
        return obj.test_questions.count()


class TestQuestionSerializer(serializers.ModelSerializer):
    question_id = serializers.IntegerField(source="question.id")
    content = serializers.CharField(source="question.content")
    type = serializers.IntegerField(source="question.type")
    type_name = serializers.CharField(source="question.get_type_display")
    difficulty = serializers.IntegerField(source="question.difficulty")
    difficulty_name = serializers.CharField(source="question.get_difficulty_display")
    skill_name = serializers.CharField(source="question.skill.name", default=None)
    bank_name = serializers.CharField(source="question.bank.name")
    score = serializers.DecimalField(source="question.score", max_digits=10, decimal_places=2)

    class Meta:
        model = TestQuestion
        fields = [
            "order",
            "question_id",
            "content",
            "type",
            "type_name",
            "difficulty",
            "difficulty_name",
            "skill_name",
            "bank_name",
            "score",
        ]
        read_only_fields = fields


class RoleAssignmentSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    role = serializers.CharField(source="target.role_name")
    level_id = serializers.IntegerField(source="target.level_id")
    level_name = serializers.CharField(allow_null=True)
    start_at = LocalDateTimeField()
    end_at = LocalDateTimeField(allow_null=True)
    is_active = serializers.BooleanField()


class TestDetailSerializer(TestSummarySerializer):
    questions = serializers.SerializerMethodField()
    assignments = serializers.SerializerMethodField()

    class Meta(TestSummarySerializer.Meta):
        fields = TestSummarySerializer.Meta.fields + ["questions", "assignments"]

    def get_questions(self, obj: Test):
        links = obj.test_questions.select_related("question__bank", "question__skill").order_by("order")
        return TestQuestionSerializer(links, many=True).data

    def get_assignments(self, obj: Test):
        return RoleAssignmentSerializer(role_assignments_for(obj), many=True).data


class TestWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    duration_minutes = serializers.IntegerField(min_value=1, max_value=1000, default=60)
    pass_score = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("1000"),
        default=Decimal("5"),
    )

    bank = serializers.PrimaryKeyRelatedField(queryset=QuestionBank.objects.all())
    skill = serializers.PrimaryKeyRelatedField(
        queryset=Skill.objects.all(), required=False, allow_null=True
    )
    type = serializers.ChoiceField(choices=Question.Type.choices, required=False, allow_null=True)
    difficulty = serializers.ChoiceField(
        choices=Question.Difficulty.choices, required=False, allow_null=True
    )
    question_count = serializers.IntegerField(min_value=1, max_value=MAX_QUESTION_COUNT)

    roles = serializers.ListField(
        child=serializers.CharField(max_length=150), required=False, default=list
    )
    level_id = serializers.IntegerField(required=False, allow_null=True)
    start_at = LocalDateTimeField(required=False, allow_null=True)
    end_at = LocalDateTimeField(required=False, allow_null=True)

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Test name is required.")
        return value

    def criteria(self) -> QuestionCriteria | None:
        data = self.validated_data
        bank = data.get("bank")
        if bank is None:
            return None
        skill = data.get("skill")
        return QuestionCriteria(
            bank_id=bank.pk,
            skill_id=skill.pk if skill else None,
            type=data.get("type"),
            difficulty=data.get("difficulty"),
        )

    def service_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "name": data["name"],
            "description": data.get("description", ""),
            "duration_minutes": data["duration_minutes"],
            "pass_score": data["pass_score"],
            "roles": data.get("roles") or [],
            "level_id": data.get("level_id"),
            "start_at": data.get("start_at"),
            "end_at": data.get("end_at"),
        }


class TestUpdateSerializer(TestWriteSerializer):
    bank = serializers.PrimaryKeyRelatedField(
        queryset=QuestionBank.objects.all(), required=False, allow_null=True
    )
    question_count = serializers.IntegerField(
        min_value=1, max_value=MAX_QUESTION_COUNT, required=False, allow_null=True
    )
    regenerate_questions = serializers.BooleanField(required=False, default=False)
    version = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    def validate(self, attrs):
        if attrs.get("regenerate_questions"):
            errors = {}
            if attrs.get("bank") is None:
                errors["bank"] = ["Choose a question bank to regenerate from."]
            if not attrs.get("question_count"):
                errors["question_count"] = ["Question count is required to regenerate."]
            if errors:
                raise serializers.ValidationError(errors)
        return attrs

    def service_kwargs(self) -> dict:
        kwargs = super().service_kwargs()
        data = self.validated_data
        kwargs.update(
            regenerate_questions=data.get("regenerate_questions", False),
            criteria=self.criteria(),
            question_count=data.get("question_count"),
            expected_version=data.get("version"),
        )
        return kwargs
