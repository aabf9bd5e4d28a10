from django.urls import path

from .views import MyTestListView, TestDetailView, TestListCreateView

urlpatterns = [
    path("api/admin/tests/", TestListCreateView.as_view(), name="test-list"),
    path("api/admin/tests/<int:pk>/", TestDetailView.as_view(), name="test-detail"),
    path("api/my/tests/", MyTestListView.as_view(), name="my-test-list"),
]
