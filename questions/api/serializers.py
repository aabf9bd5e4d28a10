from rest_framework import serializers

from ..models import Question, QuestionBank


class QuestionBankSerializer(serializers.ModelSerializer):
    skill_name = serializers.CharField(source="skill.name", read_only=True, default=None)
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = QuestionBank
        fields = ["id", "name", "description", "skill", "skill_name", "question_count"]

    def get_question_count(self, obj: QuestionBank) -> int:
        annotated = getattr(obj, "question_count", None)
        if annotated is not None:
            return annotated
        return obj.questions.count()

    def validate_name(self, value: str) -> str:
        value = value.strip()
        duplicates = QuestionBank.objects.filter(name__iexact=value)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("A question bank with this name already exists.")
        return value


class QuestionSerializer(serializers.ModelSerializer):
    bank_name = serializers.CharField(source="bank.name", read_only=True)
    skill_name = serializers.CharField(source="skill.name", read_only=True, default=None)
    type_name = serializers.CharField(source="get_type_display", read_only=True)
    difficulty_name = serializers.CharField(source="get_difficulty_display", read_only=True)

    class Meta:
        model = Question
        fields = [
            "id",
            "bank",
            "bank_name",
            "skill",
            "skill_name",
            "content",
            "type",
            "type_name",
            "difficulty",
            "difficulty_name",
            "options",
            "correct_answer",
            "score",
        ]

    def validate_content(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Question content is required.")
        return value
