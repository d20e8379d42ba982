"""Donation records: manual entries by the treasurer and processor-originated gifts."""
from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import SoftDeleteModel
from apps.core.constants import (
    DonationStatus, DonationType, PaymentMethod, RecordSource,
)


class Donation(SoftDeleteModel):
    """Individual donation record with auto-generated donation number."""

    donation_number = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        verbose_name=_('Donation number')
    )

    member = models.ForeignKey(
        'members.Member',
        on_delete=models.PROTECT,
        related_name='donations',
        verbose_name=_('Donor')
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name=_('Amount')
    )

    currency = models.CharField(
        max_length=3,
        default='CAD',
        verbose_name=_('Currency'),
        help_text=_('ISO 4217 currency code')
    )

    donation_type = models.CharField(
        max_length=20,
        choices=DonationType.CHOICES,
        default=DonationType.OFFERING,
        verbose_name=_('Donation type')
    )

    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.CHOICES,
        default=PaymentMethod.CASH,
        verbose_name=_('Payment method')
    )

    date = models.DateField(
        default=timezone.localdate,
        verbose_name=_('Donation date')
    )

    notes = models.TextField(
        blank=True,
        verbose_name=_('Notes')
    )

    source = models.CharField(
        max_length=20,
        choices=RecordSource.CHOICES,
        default=RecordSource.MANUAL,
        verbose_name=_('Source')
    )

    status = models.CharField(
        max_length=20,
        choices=DonationStatus.CHOICES,
        default=DonationStatus.SUCCEEDED,
        verbose_name=_('Status')
    )

    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Processed at')
    )

    transaction_id = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        unique=True,
        verbose_name=_('Transaction ID'),
        help_text=_('Payment processor reference (Stripe PaymentIntent)')
    )

    recorded_by = models.ForeignKey(
        'members.Member',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_donations',
        verbose_name=_('Recorded by')
    )

    # Edit audit trail (manual donations only)
    last_edited_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Last edited at')
    )

    last_edited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='edited_donations',
        verbose_name=_('Last edited by')
    )

    edit_reason = models.TextField(
        blank=True,
        verbose_name=_('Edit reason')
    )

    original_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name=_('Original amount'),
        help_text=_('Amount before the first edit')
    )

    edit_history = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Edit history')
    )

    class Meta:
        verbose_name = _('Donation')
        verbose_name_plural = _('Donations')
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['donation_number']),
            models.Index(fields=['member', 'date']),
            models.Index(fields=['status', 'source']),
        ]

    def __str__(self):
        return f'{self.donation_number} - {self.member.full_name} - ${self.amount}'

    def save(self, *args, **kwargs):
        """Auto-generate donation number on first save."""
        if not self.donation_number:
            from apps.core.utils import generate_donation_number
            self.donation_number = generate_donation_number()
        super().save(*args, **kwargs)

    @property
    def is_manual(self):
        return self.source == RecordSource.MANUAL

    @property
    def is_mutable_status(self):
        """Pending and failed transactions are never corrected by hand."""
        return self.status == DonationStatus.SUCCEEDED

    @property
    def was_edited(self):
        return self.last_edited_at is not None
