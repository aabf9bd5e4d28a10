from rest_framework import serializers

from .models import Skill


class SkillSerializer(serializers.ModelSerializer):
    bank_count = serializers.SerializerMethodField()

    class Meta:
        model = Skill
        fields = ["id", "name", "description", "bank_count"]

    def get_bank_count(self, obj: Skill) -> int:
        annotated = getattr(obj, "bank_count", None)
        if annotated is not None:
            return annotated
        return obj.question_banks.count()

    def validate_name(self, value: str) -> str:
        value = value.strip()
        duplicates = Skill.objects.filter(name__iexact=value)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("A skill with this name already exists.")
        return value
