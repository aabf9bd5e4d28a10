from django.contrib import admin

from .models import Answer, Assignment, Test, TestAttempt, TestQuestion


class TestQuestionInline(admin.TabularInline):
    model = TestQuestion
    extra = 0
    raw_id_fields = ("question",)
    ordering = ("order",)


class AssignmentInline(admin.TabularInline):
    model = Assignment
    extra = 0
    fields = ("target_type", "target_value", "start_at", "end_at", "is_active")


@admin.register(Test)
class TestAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "duration_minutes", "pass_score", "is_randomized", "version", "created_at")
    list_filter = ("is_randomized",)
    search_fields = ("name", "description")
    readonly_fields = ("version", "created_by", "created_at", "updated_at")
    inlines = [TestQuestionInline, AssignmentInline]


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "test", "target_type", "target_value", "start_at", "end_at", "is_active")
    list_filter = ("target_type", "is_active")
    search_fields = ("target_value", "test__name")


class AnswerInline(admin.TabularInline):
    model = Answer
    extra = 0
    raw_id_fields = ("question",)


@admin.register(TestAttempt)
class TestAttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "test", "user", "status", "total_score", "started_at", "submitted_at")
    list_filter = ("status",)
    raw_id_fields = ("user",)
    inlines = [AnswerInline]
