from django.urls import path

from .views import SkillDetailView, SkillListCreateView

urlpatterns = [
    path("api/admin/skills/", SkillListCreateView.as_view(), name="skill-list"),
    path("api/admin/skills/<int:pk>/", SkillDetailView.as_view(), name="skill-detail"),
]
