from django.urls import path

from .views import DepartmentDetailView, DepartmentListCreateView, LevelListView, RoleListView

urlpatterns = [
    path("api/levels/", LevelListView.as_view(), name="level-list"),
    path("api/admin/roles/", RoleListView.as_view(), name="role-list"),
    path("api/admin/departments/", DepartmentListCreateView.as_view(), name="department-list"),
    path(
        "api/admin/departments/<int:pk>/",
        DepartmentDetailView.as_view(),
        name="department-detail",
    ),
]
