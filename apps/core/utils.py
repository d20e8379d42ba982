"""Utility functions for reference-number generation and file naming."""
from __future__ import annotations

import re

from django.conf import settings
from django.db import transaction
from django.utils import timezone


def _next_number(model, field: str, base: str) -> str:
    """Next sequential number under ``base`` (BASE-XXXX), locking candidate rows."""
    with transaction.atomic():
        last = (
            model.all_objects
            .select_for_update()
            .filter(**{f'{field}__startswith': base})
            .order_by(f'-{field}')
            .first()
        )

        if last:
            try:
                next_seq = int(getattr(last, field).split('-')[-1]) + 1
            except (ValueError, IndexError):
                next_seq = 1
        else:
            next_seq = 1

    return f'{base}-{next_seq:04d}'


def generate_member_number() -> str:
    """Generate unique member number (MBR-YYYY-XXXX)."""
    from apps.members.models import Member

    prefix = getattr(settings, 'MEMBER_NUMBER_PREFIX', 'MBR')
    return _next_number(Member, 'member_number', f'{prefix}-{timezone.now().year}')


def generate_donation_number() -> str:
    """Generate unique donation number (DON-YYYYMM-XXXX)."""
    from apps.donations.models import Donation

    prefix = getattr(settings, 'DONATION_NUMBER_PREFIX', 'DON')
    base = f'{prefix}-{timezone.now().strftime("%Y%m")}'
    return _next_number(Donation, 'donation_number', base)


def generate_expense_number() -> str:
    """Generate unique expense number (EXP-YYYYMM-XXXX)."""
    from apps.expenses.models import Expense

    prefix = getattr(settings, 'EXPENSE_NUMBER_PREFIX', 'EXP')
    base = f'{prefix}-{timezone.now().strftime("%Y%m")}'
    return _next_number(Expense, 'expense_number', base)


def sanitize_filename(filename: str) -> str:
    """Replace anything outside [A-Za-z0-9_.-] with underscores."""
    return re.sub(r'[^a-zA-Z0-9_.-]', '_', filename)
