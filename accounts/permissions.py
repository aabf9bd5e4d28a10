from rest_framework import permissions

from .directory import admin_role_name


def is_hr_admin(user) -> bool:
    if user is None or not user.is_authenticated:
        return False
    return user.is_superuser or user.groups.filter(name=admin_role_name()).exists()


class IsHRAdmin(permissions.BasePermission):
    """Allow superusers and members of the administrator role."""

    message = "Administrator role required."

    def has_permission(self, request, view):
        return is_hr_admin(request.user)
