"""DRF permission classes for role-based access control."""
from rest_framework import permissions

from .constants import Roles


def is_finance_staff(user):
    """Treasurer, pastor, admin or Django staff."""
    if not user or not user.is_authenticated:
        return False
    if user.is_staff or user.is_superuser:
        return True
    if hasattr(user, 'member_profile'):
        return user.member_profile.role in Roles.FINANCE_ROLES
    return False


class IsMember(permissions.BasePermission):
    """Allows any authenticated user."""
    message = 'You must be a member to access this resource.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)


class IsTreasurer(permissions.BasePermission):
    """Requires treasurer role or higher."""
    message = 'You must be a treasurer to access this resource.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        if hasattr(request.user, 'member_profile'):
            allowed = {Roles.TREASURER, Roles.PASTOR, Roles.ADMIN}
            return request.user.member_profile.role in allowed

        return request.user.is_staff


class IsFinanceStaff(permissions.BasePermission):
    """Requires finance access: treasurer, pastor, admin or Django staff."""
    message = 'You must have finance access to use this resource.'

    def has_permission(self, request, view):
        return is_finance_staff(request.user)


class IsSubmitterOrFinanceStaff(permissions.BasePermission):
    """Object-level: the member who submitted the record, or finance staff."""
    message = 'You do not have access to this record.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if is_finance_staff(request.user):
            return True
        member = getattr(request.user, 'member_profile', None)
        return member is not None and obj.submitter_id == member.pk
