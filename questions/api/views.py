from rest_framework import generics

from accounts.permissions import IsHRAdmin

from .. import services
from ..models import Question, QuestionBank
from .serializers import QuestionBankSerializer, QuestionSerializer


def _int_param(request, name: str) -> int | None:
    raw = (request.query_params.get(name) or "").strip()
    return int(raw) if raw.isdigit() else None


class QuestionBankListCreateView(generics.ListCreateAPIView):
    serializer_class = QuestionBankSerializer
    permission_classes = [IsHRAdmin]

    def get_queryset(self):
        return services.search_banks(
            term=self.request.query_params.get("q"),
            skill_id=_int_param(self.request, "skill"),
        )


class QuestionBankDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = QuestionBank.objects.select_related("skill")
    serializer_class = QuestionBankSerializer
    permission_classes = [IsHRAdmin]

    def perform_destroy(self, instance):
        services.delete_bank(instance)


class QuestionListCreateView(generics.ListCreateAPIView):
    serializer_class = QuestionSerializer
    permission_classes = [IsHRAdmin]

    def get_queryset(self):
        request = self.request
        return services.search_questions(
            term=request.query_params.get("q"),
            bank_id=_int_param(request, "bank"),
            skill_id=_int_param(request, "skill"),
            type=_int_param(request, "type"),
            difficulty=_int_param(request, "difficulty"),
        )


class QuestionDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Question.objects.select_related("bank", "skill")
    serializer_class = QuestionSerializer
    permission_classes = [IsHRAdmin]

    def perform_destroy(self, instance):
        services.delete_question(instance)
