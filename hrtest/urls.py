"""
URL configuration for hrtest project.

Admin endpoints live under ``api/admin/``, employee endpoints under ``api/my/``.
"""
from django.contrib import admin
from django.urls import include, path

from .views import healthz

urlpatterns = [
    path("healthz/", healthz, name="healthz"),
    path("admin/", admin.site.urls),
    path("", include("accounts.urls")),
    path("", include("skills.urls")),
    path("", include("questions.api.urls")),
    path("", include("assessments.api.urls")),
    path("", include("notifications.urls")),
]
