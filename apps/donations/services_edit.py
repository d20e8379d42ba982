"""Corrections to manually recorded donations, inside the edit window only."""
import logging

from django.db import transaction
from django.utils import timezone

from apps.core.edit_window import EditWindowPolicy

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ['amount', 'date', 'member', 'donation_type', 'payment_method', 'notes']


class DonationNotEditable(Exception):
    """The donation is processor-originated, not settled, or past its edit window."""

    def __init__(self, message='This donation can no longer be edited. The edit window has expired.'):
        super().__init__(message)
        self.message = message


def _history_value(value):
    if hasattr(value, 'pk'):
        return str(value.pk)
    if value is None:
        return None
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


class DonationEditService:
    """Applies an audited edit to a manual donation."""

    @staticmethod
    def edit_manual_donation(donation, changes, edited_by, reason, policy=None):
        """
        Apply ``changes`` (subset of EDITABLE_FIELDS) to ``donation``.

        Appends an entry to ``edit_history`` listing only the fields that
        actually changed, keeps the amount from before the first edit, and
        raises DonationNotEditable outside the window.
        """
        policy = policy or EditWindowPolicy.for_donations()

        with transaction.atomic():
            # Re-read under lock so two treasurers cannot interleave edits.
            donation = type(donation).objects.select_for_update().get(pk=donation.pk)

            if not policy.evaluate(donation).editable:
                raise DonationNotEditable()

            previous_amount = donation.amount
            diff = {}
            for field in EDITABLE_FIELDS:
                if field not in changes:
                    continue
                old = getattr(donation, field)
                new = changes[field]
                if old != new:
                    diff[field] = {'from': _history_value(old), 'to': _history_value(new)}
                    setattr(donation, field, new)

            now = timezone.now()
            if 'amount' in diff and donation.original_amount is None:
                donation.original_amount = previous_amount

            donation.edit_history = list(donation.edit_history or []) + [{
                'edited_at': now.isoformat(),
                'edited_by': str(edited_by.pk) if edited_by else None,
                'reason': reason,
                'changes': diff,
            }]
            donation.last_edited_at = now
            donation.last_edited_by = edited_by
            donation.edit_reason = reason
            donation.save()

        logger.info(
            f'Donation {donation.donation_number} edited by '
            f'{getattr(edited_by, "pk", None)}: {", ".join(diff) or "no field changes"}'
        )
        return donation
