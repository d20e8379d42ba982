"""Expense admin configuration."""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.admin import SoftDeleteModelAdmin

from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(SoftDeleteModelAdmin):
    list_display = [
        'expense_number',
        'vendor',
        'amount',
        'category',
        'status',
        'submitter',
        'expense_date',
    ]

    list_filter = ['status', 'category', 'expense_date']

    search_fields = [
        'expense_number',
        'vendor',
        'description',
        'submitter__first_name',
        'submitter__last_name',
    ]

    readonly_fields = [
        'id',
        'expense_number',
        'source',
        'receipt_path',
        'receipt_url',
        'created_at',
        'updated_at',
        'deleted_at',
    ]

    autocomplete_fields = ['submitter', 'approver']

    date_hierarchy = 'expense_date'

    fieldsets = (
        (_('Expense'), {
            'fields': (
                'expense_number',
                'amount',
                'currency',
                'expense_date',
                'category',
                'vendor',
                'description',
            )
        }),
        (_('Review'), {
            'fields': ('source', 'status', 'submitter', 'approver')
        }),
        (_('Receipt'), {
            'fields': ('receipt_path', 'receipt_url'),
        }),
        (_('Metadata'), {
            'fields': ('id', 'is_active', 'created_at', 'updated_at', 'deleted_at'),
            'classes': ('collapse',)
        }),
    )
