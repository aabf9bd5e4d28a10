from django.urls import path

from .views import (
    QuestionBankDetailView,
    QuestionBankListCreateView,
    QuestionDetailView,
    QuestionListCreateView,
)

urlpatterns = [
    path("api/admin/banks/", QuestionBankListCreateView.as_view(), name="bank-list"),
    path("api/admin/banks/<int:pk>/", QuestionBankDetailView.as_view(), name="bank-detail"),
    path("api/admin/questions/", QuestionListCreateView.as_view(), name="question-list"),
    path(
        "api/admin/questions/<int:pk>/",
        QuestionDetailView.as_view(),
        name="question-detail",
    ),
]
