"""Signed receipt links and the errors raised while fetching them."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class ReceiptLinkError(Exception):
    """The storage collaborator answered with an error. Shown to the user, not retried."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ReceiptLinkUnavailable(Exception):
    """Transient failure (network, timeout). Absorbed; the next explicit view retries."""


@dataclass(frozen=True)
class SignedLink:
    """Time-limited URL for a stored receipt."""

    url: str
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at
