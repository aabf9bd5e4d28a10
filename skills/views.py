from django.db.models import Count, Q
from rest_framework import generics

from accounts.permissions import IsHRAdmin

from .models import Skill
from .serializers import SkillSerializer


class SkillListCreateView(generics.ListCreateAPIView):
    serializer_class = SkillSerializer
    permission_classes = [IsHRAdmin]

    def get_queryset(self):
        queryset = Skill.objects.annotate(bank_count=Count("question_banks", distinct=True))
        term = (self.request.query_params.get("q") or "").strip()
        if term:
            queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
        return queryset.order_by("name")


class SkillDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Skill.objects.all()
    serializer_class = SkillSerializer
    permission_classes = [IsHRAdmin]
