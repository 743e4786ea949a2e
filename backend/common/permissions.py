# common/permissions.py
from rest_framework.permissions import BasePermission


def is_platform_admin(user) -> bool:
    """Admins are users with the ADMIN role, plus Django superusers."""
    if not user or not user.is_authenticated:
        return False
    return getattr(user, "role", None) == "ADMIN" or user.is_superuser


class _RolePermission(BasePermission):
    role = None

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "role", None) == self.role


class IsCustomer(_RolePermission):
    """
    Allows access only to users with role == 'CUSTOMER'.
    Keeps role check logic centralized.
    """
    role = "CUSTOMER"
    message = "Only customers can perform this action"


class IsWorkshop(_RolePermission):
    """Allows access only to workshop accounts."""
    role = "WORKSHOP"
    message = "Only workshops can perform this action"


class IsPlatformAdmin(BasePermission):
    message = "Administrator access required"

    def has_permission(self, request, view):
        return is_platform_admin(getattr(request, "user", None))
