"""Member management admin configuration."""
from django.contrib import admin

from apps.core.admin import SoftDeleteModelAdmin

from .models import Member


@admin.register(Member)
class MemberAdmin(SoftDeleteModelAdmin):
    """Admin for donors and staff profiles."""

    list_display = ['member_number', 'full_name', 'email', 'role', 'is_active']
    list_filter = ['role', 'is_active']
    search_fields = ['member_number', 'first_name', 'last_name', 'email']
    readonly_fields = ['id', 'member_number', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['user']
