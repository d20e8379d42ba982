"""Church expenses submitted by members, with an optional receipt in private storage."""
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import SoftDeleteModel
from apps.core.constants import ExpenseCategory, ExpenseStatus, RecordSource


class Expense(SoftDeleteModel):
    """
    Expense record with auto-generated expense number.

    ``receipt_path`` is the opaque storage reference; ``receipt_url`` only
    holds the last signed URL handed out and goes stale on its own.
    """

    expense_number = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        verbose_name=_('Expense number')
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name=_('Amount')
    )

    currency = models.CharField(
        max_length=3,
        default='CAD',
        verbose_name=_('Currency')
    )

    expense_date = models.DateField(
        default=timezone.localdate,
        verbose_name=_('Expense date')
    )

    category = models.CharField(
        max_length=20,
        choices=ExpenseCategory.CHOICES,
        default=ExpenseCategory.OTHER,
        verbose_name=_('Category')
    )

    vendor = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_('Vendor')
    )

    description = models.TextField(
        blank=True,
        verbose_name=_('Description')
    )

    source = models.CharField(
        max_length=20,
        choices=RecordSource.CHOICES,
        default=RecordSource.MANUAL,
        verbose_name=_('Source')
    )

    status = models.CharField(
        max_length=20,
        choices=ExpenseStatus.CHOICES,
        default=ExpenseStatus.PENDING,
        verbose_name=_('Status')
    )

    submitter = models.ForeignKey(
        'members.Member',
        on_delete=models.PROTECT,
        related_name='submitted_expenses',
        verbose_name=_('Submitted by')
    )

    approver = models.ForeignKey(
        'members.Member',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_expenses',
        verbose_name=_('Approved by')
    )

    receipt_path = models.CharField(
        max_length=500,
        blank=True,
        verbose_name=_('Receipt storage path')
    )

    receipt_url = models.URLField(
        max_length=2000,
        blank=True,
        verbose_name=_('Last receipt link')
    )

    class Meta:
        verbose_name = _('Expense')
        verbose_name_plural = _('Expenses')
        ordering = ['-expense_date', '-created_at']
        indexes = [
            models.Index(fields=['expense_number']),
            models.Index(fields=['submitter', 'status']),
            models.Index(fields=['expense_date']),
        ]

    def __str__(self):
        return f'{self.expense_number} - {self.vendor or self.get_category_display()} - ${self.amount}'

    def save(self, *args, **kwargs):
        if not self.expense_number:
            from apps.core.utils import generate_expense_number
            self.expense_number = generate_expense_number()
        super().save(*args, **kwargs)

    @property
    def has_receipt(self):
        return bool(self.receipt_path)

    @property
    def is_mutable_status(self):
        """Approved or rejected expenses are settled."""
        return self.status == ExpenseStatus.PENDING
