"""
REST client used by the record drawers.

Wraps a ``requests.Session`` (cookies or auth headers are set by the caller)
and turns API payloads into ``RecordSnapshot`` objects the edit-window policy
can evaluate with the caller's own clock.

Usage:
    client = ChurchApiClient('https://app.example.org', session=session)
    donation = client.get_donation(donation_id)
    link = client.fetch_receipt_link(expense_id)
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from typing import Optional

import requests
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.core.constants import DonationStatus, ExpenseStatus
from apps.core.signed_links import ReceiptLinkError, ReceiptLinkUnavailable, SignedLink

logger = logging.getLogger(__name__)

DONATION_PATH = '/api/v1/donations/donations/{id}/'
EXPENSE_PATH = '/api/v1/expenses/expenses/{id}/'
REFRESH_RECEIPT_PATH = '/api/expenses/refresh-receipt-url'


class ApiClientError(Exception):
    """A record could not be fetched (HTTP error or transport failure)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class RecordSnapshot:
    """Read-only view of a donation or expense as returned by the API."""

    id: str
    kind: str
    source: str
    status: str
    created_at: Optional[datetime]
    receipt_path: Optional[str] = None
    data: dict = field(default_factory=dict)

    @property
    def is_mutable_status(self) -> bool:
        if self.kind == 'donation':
            return self.status == DonationStatus.SUCCEEDED
        return self.status == ExpenseStatus.PENDING

    @classmethod
    def from_payload(cls, kind: str, payload: dict) -> 'RecordSnapshot':
        created_at = payload.get('created_at')
        return cls(
            id=str(payload['id']),
            kind=kind,
            source=payload.get('source', ''),
            status=payload.get('status', ''),
            created_at=_parse_timestamp(created_at),
            receipt_path=payload.get('receipt_path') or None,
            data=payload,
        )


def _parse_timestamp(value) -> Optional[datetime]:
    """API timestamps without an offset are UTC."""
    parsed = parse_datetime(value) if value else None
    if parsed is not None and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def _json_body(response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class ChurchApiClient:
    """Thin requests-based client for the donation and expense endpoints."""

    def __init__(self, base_url: str, session: requests.Session = None, timeout: float = None):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout or getattr(settings, 'API_CLIENT_TIMEOUT', 10)

    def _url(self, path: str) -> str:
        return f'{self.base_url}{path}'

    def _get_record(self, kind: str, path: str) -> RecordSnapshot:
        try:
            response = self.session.get(self._url(path), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f'Fetching {kind} failed: {e}')
            raise ApiClientError(f'Could not reach the server: {e}') from e

        body = _json_body(response)
        if not response.ok:
            message = body.get('error') or body.get('detail') or f'HTTP {response.status_code}'
            raise ApiClientError(str(message), status_code=response.status_code)
        if not body.get('id'):
            raise ApiClientError(f'The server returned no {kind}.', status_code=response.status_code)
        return RecordSnapshot.from_payload(kind, body)

    def get_donation(self, donation_id) -> RecordSnapshot:
        return self._get_record('donation', DONATION_PATH.format(id=donation_id))

    def get_expense(self, expense_id) -> RecordSnapshot:
        return self._get_record('expense', EXPENSE_PATH.format(id=expense_id))

    def fetch_receipt_link(self, expense_id) -> SignedLink:
        """
        POST /api/expenses/refresh-receipt-url {expenseId}
        -> {receiptUrl, expiresAt} | {error}
        """
        try:
            response = self.session.post(
                self._url(REFRESH_RECEIPT_PATH),
                json={'expenseId': str(expense_id)},
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            raise ReceiptLinkUnavailable(str(e)) from e
        except requests.RequestException as e:
            raise ReceiptLinkError(f'Could not request a receipt link: {e}') from e

        body = _json_body(response)
        if not response.ok:
            raise ReceiptLinkError(
                body.get('error') or f'HTTP {response.status_code}',
                status_code=response.status_code,
            )

        url = body.get('receiptUrl')
        if not url:
            raise ReceiptLinkError('No receipt URL was returned.', status_code=response.status_code)

        return SignedLink(url=url, expires_at=_parse_timestamp(body.get('expiresAt')))

    def close(self):
        self.session.close()
