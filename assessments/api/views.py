from django.db.models import Count, Q
from rest_framework import generics, status
from rest_framework.response import Response

from accounts.permissions import IsHRAdmin

from ..models import Assignment, Test
from ..service_utils import workflow
from ..service_utils.assignment import active_tests_for
from ..service_utils.targets import SEPARATOR
from .serializers import (
    TestDetailSerializer,
    TestSummarySerializer,
    TestUpdateSerializer,
    TestWriteSerializer,
)


def _with_question_count(queryset):
    return queryset.annotate(question_count=Count("test_questions", distinct=True))


class TestListCreateView(generics.ListCreateAPIView):
    permission_classes = [IsHRAdmin]

    def get_serializer_class(self):
        if self.request.method == "POST":
            return TestWriteSerializer
        return TestSummarySerializer

    def get_queryset(self):
        queryset = _with_question_count(Test.objects.all())
        term = (self.request.query_params.get("q") or "").strip()
        if term:
            queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
        role = (self.request.query_params.get("role") or "").strip()
        if role:
            assigned = Assignment.objects.filter(
                target_type=Assignment.TargetType.ROLE,
                target_value__startswith=f"{role}{SEPARATOR}",
            ).values("test_id")
            queryset = queryset.filter(pk__in=assigned)
        return queryset.order_by("-id")

    def create(self, request, *args, **kwargs):
        serializer = TestWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        test = workflow.create_test(
            criteria=serializer.criteria(),
            question_count=serializer.validated_data["question_count"],
            created_by=request.user.get_username(),
            **serializer.service_kwargs(),
        )
        return Response(TestDetailSerializer(test).data, status=status.HTTP_201_CREATED)


class TestDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [IsHRAdmin]
    serializer_class = TestDetailSerializer
    http_method_names = ["get", "put", "delete", "head", "options"]

    def get_queryset(self):
        return _with_question_count(Test.objects.all())

    def update(self, request, *args, **kwargs):
        test = self.get_object()
        serializer = TestUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        workflow.update_test(test, **serializer.service_kwargs())
        return Response(TestDetailSerializer(self.get_queryset().get(pk=test.pk)).data)

    def perform_destroy(self, instance):
        workflow.delete_test(instance)


class MyTestListView(generics.ListAPIView):
    """Tests currently assigned to the signed-in employee."""

    serializer_class = TestSummarySerializer

    def get_queryset(self):
        return _with_question_count(active_tests_for(self.request.user))
