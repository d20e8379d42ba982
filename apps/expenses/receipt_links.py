"""
Receipt link materializer.

Receipts live in private storage and can only be viewed through signed URLs
that expire. The materializer keeps one short-lived link per expense in
memory, asks the storage collaborator for a fresh one when the cached link is
missing, expired or failed to load, and never retries on its own.

Per-record state machine:

    UNRESOLVED -> LOADING -> RESOLVED(url, expiry) -> EXPIRED -> LOADING ...

The cache belongs to whoever created the materializer (typically one expense
drawer) and is discarded through ``invalidate``/``clear`` when that surface
closes. Links are never persisted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from django.conf import settings
from django.utils import timezone

from apps.core.signed_links import ReceiptLinkError, ReceiptLinkUnavailable, SignedLink

logger = logging.getLogger(__name__)


class LinkState:
    UNRESOLVED = 'unresolved'
    LOADING = 'loading'
    RESOLVED = 'resolved'
    EXPIRED = 'expired'


@dataclass
class _Entry:
    storage_ref: Optional[str]
    state: str = LinkState.UNRESOLVED
    link: Optional[SignedLink] = None
    error: Optional[str] = None
    # Set when the current link was issued to recover from a load failure.
    recovering: bool = False


class ReceiptLinkMaterializer:
    """
    Keyed in-memory cache of signed receipt links.

    ``fetch_link(record_id) -> SignedLink`` is the storage collaborator; it
    raises ``ReceiptLinkError`` for explicit error responses and
    ``ReceiptLinkUnavailable`` for transport failures.
    """

    def __init__(
        self,
        fetch_link: Callable[[str], SignedLink],
        clock: Callable[[], datetime] = None,
        safety_margin: Optional[timedelta] = None,
        default_ttl: Optional[timedelta] = None,
    ):
        self.fetch_link = fetch_link
        self.clock = clock or timezone.now
        if safety_margin is None:
            safety_margin = timedelta(
                seconds=getattr(settings, 'RECEIPT_LINK_SAFETY_MARGIN_SECONDS', 60)
            )
        if default_ttl is None:
            default_ttl = timedelta(
                seconds=getattr(settings, 'RECEIPT_SIGNED_URL_TTL_SECONDS', 900)
            )
        self.safety_margin = safety_margin
        self.default_ttl = default_ttl
        self._entries: Dict[str, _Entry] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def state(self, record_id) -> str:
        entry = self._entries.get(str(record_id))
        if entry is None:
            return LinkState.UNRESOLVED
        if entry.state == LinkState.RESOLVED and entry.link.is_expired(self.clock()):
            return LinkState.EXPIRED
        return entry.state

    def error(self, record_id) -> Optional[str]:
        entry = self._entries.get(str(record_id))
        return entry.error if entry else None

    def cached_link(self, record_id) -> Optional[SignedLink]:
        entry = self._entries.get(str(record_id))
        return entry.link if entry else None

    def __contains__(self, record_id) -> bool:
        return str(record_id) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_link(self, record_id, storage_ref: Optional[str]) -> Optional[str]:
        """
        Return a usable URL for the record's receipt, requesting one if needed.

        Returns None when the record has no receipt or when a transient
        failure was absorbed. Raises ReceiptLinkError on an explicit error.
        """
        key = str(record_id)
        if not storage_ref:
            self._entries.pop(key, None)
            return None

        entry = self._entries.get(key)
        if entry is None or entry.storage_ref != storage_ref:
            # A replaced receipt invalidates whatever was cached for the old one.
            entry = _Entry(storage_ref=storage_ref)
            self._entries[key] = entry

        if entry.state == LinkState.RESOLVED:
            if not entry.link.is_expired(self.clock()):
                return entry.link.url
            entry.state = LinkState.EXPIRED

        return self._resolve(key, entry)

    def report_load_failure(self, record_id) -> Optional[str]:
        """
        The cached URL failed to load (broken image, 403 from storage...).

        Moves the entry Resolved -> Expired -> Loading and requests a new link
        once. A failure on a link that was itself issued to recover from a
        failure is not retried; the entry records a user-visible error.
        """
        key = str(record_id)
        entry = self._entries.get(key)
        if entry is None or entry.state != LinkState.RESOLVED:
            return None

        entry.state = LinkState.EXPIRED
        if entry.recovering:
            entry.state = LinkState.UNRESOLVED
            entry.link = None
            entry.recovering = False
            entry.error = 'The receipt could not be displayed.'
            logger.warning(f'Receipt link for {key} failed to load again; not retrying')
            return None

        url = self._resolve(key, entry)
        current = self._entries.get(key)
        if url and current is entry:
            entry.recovering = True
        return url

    def report_loaded(self, record_id):
        """The link rendered; a later failure may be retried again."""
        entry = self._entries.get(str(record_id))
        if entry is not None:
            entry.recovering = False

    def dismiss_error(self, record_id):
        entry = self._entries.get(str(record_id))
        if entry is not None:
            entry.error = None

    def invalidate(self, record_id):
        """Drop the cached link; called when the owning drawer closes."""
        self._entries.pop(str(record_id), None)

    def clear(self):
        self._entries.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self, key: str, entry: _Entry) -> Optional[str]:
        entry.state = LinkState.LOADING
        entry.error = None
        try:
            link = self.fetch_link(key)
        except ReceiptLinkUnavailable as e:
            logger.info(f'Receipt link for {key} temporarily unavailable: {e}')
            self._settle_unresolved(key, entry)
            return None
        except ReceiptLinkError as e:
            logger.warning(f'Receipt link for {key} failed: {e.message}')
            if self._entries.get(key) is entry:
                self._settle_unresolved(key, entry)
                entry.error = e.message
            raise

        if self._entries.get(key) is not entry:
            # Invalidated while the request was in flight.
            return None

        entry.link = SignedLink(url=link.url, expires_at=self._local_expiry(link))
        entry.state = LinkState.RESOLVED
        return entry.link.url

    def _settle_unresolved(self, key: str, entry: _Entry):
        entry.state = LinkState.UNRESOLVED
        entry.link = None
        entry.recovering = False

    def _local_expiry(self, link: SignedLink) -> datetime:
        provider_expiry = link.expires_at or (self.clock() + self.default_ttl)
        return provider_expiry - self.safety_margin
