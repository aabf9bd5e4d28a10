from django.db.models import Count, Q
from rest_framework import generics, permissions
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from . import directory
from .models import Department, Level
from .permissions import IsHRAdmin
from .serializers import DepartmentSerializer, LevelSerializer


class LevelListView(generics.ListAPIView):
    queryset = Level.objects.order_by("id")
    serializer_class = LevelSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None


class RoleListView(APIView):
    """Roles that tests can be assigned to (the admin role is excluded)."""

    permission_classes = [IsHRAdmin]

    def get(self, request, *args, **kwargs):
        return Response(directory.assignable_role_names())


class DepartmentListCreateView(generics.ListCreateAPIView):
    serializer_class = DepartmentSerializer
    permission_classes = [IsHRAdmin]

    def get_queryset(self):
        queryset = Department.objects.annotate(employee_count=Count("employees"))
        term = (self.request.query_params.get("q") or "").strip()
        if term:
            queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
        return queryset.order_by("name")


class DepartmentDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = DepartmentSerializer
    permission_classes = [IsHRAdmin]

    def get_queryset(self):
        return Department.objects.annotate(employee_count=Count("employees"))

    def perform_destroy(self, instance):
        if instance.employees.exists():
            raise ValidationError("Department still has employees and cannot be deleted.")
        instance.delete()
