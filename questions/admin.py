from django import forms
from django.contrib import admin

from .models import Question, QuestionBank


class QuestionAdminForm(forms.ModelForm):
    options = forms.JSONField(
        required=False,
        widget=forms.Textarea(attrs={"rows": 6, "cols": 80}),
        help_text='For MCQ, e.g. ["A", "B", "C", "D"].',
    )
    correct_answer = forms.JSONField(
        required=False,
        widget=forms.Textarea(attrs={"rows": 4, "cols": 80}),
        help_text='E.g. {"value": "B"} or {"choices": [0, 2]}.',
    )

    class Meta:
        model = Question
        fields = "__all__"


class QuestionInline(admin.TabularInline):
    model = Question
    fields = ("content", "type", "difficulty", "skill", "score")
    extra = 0
    show_change_link = True


@admin.register(QuestionBank)
class QuestionBankAdmin(admin.ModelAdmin):
    list_display = ("name", "skill")
    list_filter = ("skill",)
    search_fields = ("name", "description")
    inlines = [QuestionInline]


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    form = QuestionAdminForm
    list_display = ("id", "bank", "skill", "type", "difficulty", "score")
    list_filter = ("bank", "skill", "type", "difficulty")
    search_fields = ("content",)
    list_select_related = ("bank", "skill")
