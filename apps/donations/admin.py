"""Donation management admin configuration."""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.admin import SoftDeleteModelAdmin

from .models import Donation


@admin.register(Donation)
class DonationAdmin(SoftDeleteModelAdmin):
    """Admin for donations with source, status and edit audit."""

    list_display = [
        'donation_number',
        'member',
        'amount',
        'donation_type',
        'payment_method',
        'source',
        'status',
        'date',
    ]

    list_filter = [
        'source',
        'status',
        'donation_type',
        'payment_method',
        'date',
    ]

    search_fields = [
        'donation_number',
        'transaction_id',
        'member__first_name',
        'member__last_name',
        'member__member_number',
    ]

    readonly_fields = [
        'id',
        'donation_number',
        'source',
        'transaction_id',
        'processed_at',
        'last_edited_at',
        'last_edited_by',
        'edit_reason',
        'original_amount',
        'edit_history',
        'created_at',
        'updated_at',
        'deleted_at',
    ]

    autocomplete_fields = ['member', 'recorded_by']

    date_hierarchy = 'date'

    fieldsets = (
        (_('Donation'), {
            'fields': (
                'donation_number',
                'member',
                'amount',
                'currency',
                'donation_type',
                'payment_method',
                'date',
                'notes',
            )
        }),
        (_('Origin'), {
            'fields': ('source', 'status', 'transaction_id', 'processed_at', 'recorded_by')
        }),
        (_('Edits'), {
            'fields': ('last_edited_at', 'last_edited_by', 'edit_reason', 'original_amount', 'edit_history'),
            'classes': ('collapse',)
        }),
        (_('Metadata'), {
            'fields': ('id', 'is_active', 'created_at', 'updated_at', 'deleted_at'),
            'classes': ('collapse',)
        }),
    )
