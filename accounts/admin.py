from django.contrib import admin

from .models import Department, EmployeeProfile, Level


@admin.register(Level)
class LevelAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "description")
    search_fields = ("name",)


@admin.register(EmployeeProfile)
class EmployeeProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "full_name", "department", "level")
    list_filter = ("department", "level")
    search_fields = ("user__username", "user__email", "full_name")
    raw_id_fields = ("user",)
