from django.urls import path

from .views import NotificationListView, NotificationReadView

urlpatterns = [
    path("api/notifications/", NotificationListView.as_view(), name="notification-list"),
    path(
        "api/notifications/<int:pk>/read/",
        NotificationReadView.as_view(),
        name="notification-read",
    ),
]
