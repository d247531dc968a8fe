# users/permissions.py

from rest_framework.permissions import BasePermission


# ---------------- BASE ROLE PERMISSION ----------------
class HasRole(BasePermission):
    """
    Base permission to check user role safely.
    """

    allowed_roles = set()

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role in self.allowed_roles)


# ---------------- ROLE PERMISSIONS ----------------
class IsAdmin(HasRole):
    """Store administrators: order fulfilment + cancellations."""

    allowed_roles = {"admin"}


class IsMember(HasRole):
    """Any signed-in member (customers and admins can both shop)."""

    allowed_roles = {"customer", "admin"}
