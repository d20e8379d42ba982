"""
Edit-window policy for financial records.

Manual donations and expenses may be corrected for a limited time after they
were recorded. Records that came from the payment processor are never
editable. The policy is pure: it reads the record's server-assigned
``created_at`` and the caller's clock, and returns a decision.

Usage:
    policy = EditWindowPolicy.for_donations()
    decision = policy.evaluate(donation)
    if decision.editable:
        print(f'Editable for {decision.remaining_display}')
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from django.conf import settings
from django.utils import timezone

from .constants import RecordSource

DEFAULT_EDIT_WINDOW_MINUTES = 24 * 60


@dataclass(frozen=True)
class EditWindowDecision:
    """Derived, never persisted: whether a record may still be mutated."""

    editable: bool
    remaining: Optional[timedelta] = None

    @property
    def remaining_display(self) -> Optional[str]:
        if self.remaining is None:
            return None
        return format_remaining(self.remaining)

    @property
    def remaining_seconds(self) -> Optional[int]:
        if self.remaining is None:
            return None
        return int(self.remaining.total_seconds())

    def as_dict(self) -> dict:
        return {
            'editable': self.editable,
            'remaining': self.remaining_display,
            'remaining_seconds': self.remaining_seconds,
        }


LOCKED = EditWindowDecision(editable=False, remaining=None)


def _plural(count: int, word: str) -> str:
    return f'{count} {word}' if count == 1 else f'{count} {word}s'


def format_remaining(remaining: timedelta) -> str:
    """
    Render a remaining duration for humans.

    Minutes are floored: 55m30s -> "55 minutes", 2h05m -> "2 hours 5 minutes".
    """
    total_minutes = int(remaining.total_seconds() // 60)
    if total_minutes < 1:
        return 'less than a minute'

    hours, minutes = divmod(total_minutes, 60)
    if not hours:
        return _plural(minutes, 'minute')
    if not minutes:
        return _plural(hours, 'hour')
    return f'{_plural(hours, "hour")} {_plural(minutes, "minute")}'


class EditWindowPolicy:
    """Decides whether a financial record is still inside its edit window."""

    def __init__(self, grace_period: timedelta, clock: Callable = None):
        self.grace_period = grace_period
        self.clock = clock or timezone.now

    @classmethod
    def for_donations(cls, clock: Callable = None) -> 'EditWindowPolicy':
        minutes = getattr(settings, 'DONATION_EDIT_WINDOW_MINUTES', DEFAULT_EDIT_WINDOW_MINUTES)
        return cls(timedelta(minutes=minutes), clock=clock)

    @classmethod
    def for_expenses(cls, clock: Callable = None) -> 'EditWindowPolicy':
        minutes = getattr(settings, 'EXPENSE_EDIT_WINDOW_MINUTES', DEFAULT_EDIT_WINDOW_MINUTES)
        return cls(timedelta(minutes=minutes), clock=clock)

    def evaluate(self, record) -> EditWindowDecision:
        """
        Return the edit-window decision for ``record``.

        ``record`` needs ``source`` and ``created_at``; when it also exposes
        ``is_mutable_status`` a false value locks it (e.g. a failed donation or
        an approved expense).
        """
        if getattr(record, 'source', None) != RecordSource.MANUAL:
            return LOCKED

        if not getattr(record, 'is_mutable_status', True):
            return LOCKED

        created_at = getattr(record, 'created_at', None)
        if created_at is None:
            return LOCKED

        now = self.clock()
        if timezone.is_naive(created_at) or timezone.is_naive(now):
            return LOCKED

        elapsed = now - created_at
        if elapsed >= self.grace_period:
            return LOCKED

        # A caller clock behind the server's would report more than a full window.
        remaining = min(self.grace_period - elapsed, self.grace_period)
        return EditWindowDecision(editable=True, remaining=remaining)

    def is_editable(self, record) -> bool:
        return self.evaluate(record).editable
