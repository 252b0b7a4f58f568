"""Permission classes shared by the API apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_admin_user(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


class IsAdminRole(permissions.BasePermission):
    """Only platform administrators."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin_user(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    """Anyone may read, administrators may write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin_user(request.user)
