"""Tests for the signed receipt link materializer."""
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from apps.expenses.receipt_links import (
    LinkState,
    ReceiptLinkError,
    ReceiptLinkMaterializer,
    ReceiptLinkUnavailable,
    SignedLink,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **delta):
        self.now = self.now + timedelta(**delta)


class FakeStorage:
    """Records requests and answers with queued outcomes."""

    def __init__(self, clock, ttl=timedelta(minutes=15)):
        self.clock = clock
        self.ttl = ttl
        self.calls = []
        self.outcomes = []

    def __call__(self, record_id):
        self.calls.append(record_id)
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        n = len(self.calls)
        return SignedLink(url=f'https://storage.test/{record_id}?token={n}', expires_at=self.clock() + self.ttl)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(clock):
    return FakeStorage(clock)


@pytest.fixture
def links(storage, clock):
    return ReceiptLinkMaterializer(
        storage,
        clock=clock,
        safety_margin=timedelta(seconds=60),
        default_ttl=timedelta(seconds=900),
    )


class TestGetLink:
    """Tests for ReceiptLinkMaterializer.get_link."""

    def test_no_receipt_makes_no_request(self, links, storage):
        assert links.get_link('exp-1', None) is None
        assert links.get_link('exp-1', '') is None
        assert storage.calls == []

    def test_first_call_requests_once_then_cache_hit(self, links, storage):
        first = links.get_link('exp-1', 'church/receipts/u/1_a.pdf')
        second = links.get_link('exp-1', 'church/receipts/u/1_a.pdf')

        assert first == second
        assert storage.calls == ['exp-1']
        assert links.state('exp-1') == LinkState.RESOLVED

    def test_expired_link_is_refreshed(self, links, storage, clock):
        links.get_link('exp-1', 'path')

        clock.advance(minutes=14, seconds=1)

        assert links.state('exp-1') == LinkState.EXPIRED
        url = links.get_link('exp-1', 'path')
        assert url.endswith('token=2')
        assert len(storage.calls) == 2

    def test_safety_margin_applied_to_provider_expiry(self, links, clock):
        links.get_link('exp-1', 'path')

        assert links.cached_link('exp-1').expires_at == NOW + timedelta(minutes=15) - timedelta(seconds=60)

    def test_missing_provider_expiry_uses_default_ttl(self, links, storage, clock):
        storage.outcomes.append(SignedLink(url='https://storage.test/x'))

        links.get_link('exp-1', 'path')

        assert links.cached_link('exp-1').expires_at == NOW + timedelta(seconds=900) - timedelta(seconds=60)

    def test_new_storage_ref_replaces_cached_link(self, links, storage):
        links.get_link('exp-1', 'old.pdf')
        links.get_link('exp-1', 'new.pdf')

        assert len(storage.calls) == 2

    def test_records_are_cached_independently(self, links, storage):
        links.get_link('exp-1', 'a')
        links.get_link('exp-2', 'b')
        links.get_link('exp-1', 'a')

        assert storage.calls == ['exp-1', 'exp-2']
        assert len(links) == 2

    def test_receipt_removed_drops_entry(self, links):
        links.get_link('exp-1', 'a')
        links.get_link('exp-1', None)

        assert 'exp-1' not in links


class TestErrors:
    """Terminal and transient failures."""

    def test_error_response_is_surfaced_and_entry_unresolved(self, links, storage):
        storage.outcomes.append(ReceiptLinkError('Failed to generate signed URL for receipt', status_code=500))

        with pytest.raises(ReceiptLinkError):
            links.get_link('X', 'path')

        assert links.state('X') == LinkState.UNRESOLVED
        assert links.cached_link('X') is None
        assert links.error('X') == 'Failed to generate signed URL for receipt'

    def test_error_is_not_retried_automatically(self, links, storage):
        storage.outcomes.append(ReceiptLinkError('boom', status_code=500))

        with pytest.raises(ReceiptLinkError):
            links.get_link('X', 'path')

        assert storage.calls == ['X']

    def test_dismiss_error(self, links, storage):
        storage.outcomes.append(ReceiptLinkError('boom', status_code=500))
        with pytest.raises(ReceiptLinkError):
            links.get_link('X', 'path')

        links.dismiss_error('X')

        assert links.error('X') is None

    def test_transient_failure_is_absorbed(self, links, storage):
        storage.outcomes.append(ReceiptLinkUnavailable('timed out'))

        assert links.get_link('exp-1', 'path') is None
        assert links.state('exp-1') == LinkState.UNRESOLVED
        assert links.error('exp-1') is None

    def test_next_call_after_transient_failure_retries_once(self, links, storage):
        storage.outcomes.append(ReceiptLinkUnavailable('timed out'))
        links.get_link('exp-1', 'path')

        url = links.get_link('exp-1', 'path')

        assert url is not None
        assert len(storage.calls) == 2


class TestLoadFailure:
    """Explicit load-failure transitions."""

    def test_load_failure_requests_exactly_one_new_link(self, links, storage):
        first = links.get_link('exp-1', 'path')

        second = links.report_load_failure('exp-1')

        assert second != first
        assert len(storage.calls) == 2
        assert links.state('exp-1') == LinkState.RESOLVED

    def test_repeated_failure_of_recovery_link_does_not_loop(self, links, storage):
        links.get_link('exp-1', 'path')
        links.report_load_failure('exp-1')

        assert links.report_load_failure('exp-1') is None
        assert links.report_load_failure('exp-1') is None

        assert len(storage.calls) == 2
        assert links.state('exp-1') == LinkState.UNRESOLVED
        assert links.error('exp-1') == 'The receipt could not be displayed.'

    def test_report_loaded_allows_a_later_retry(self, links, storage):
        links.get_link('exp-1', 'path')
        links.report_load_failure('exp-1')
        links.report_loaded('exp-1')

        assert links.report_load_failure('exp-1') is not None
        assert len(storage.calls) == 3

    def test_failure_without_resolved_link_is_ignored(self, links, storage):
        assert links.report_load_failure('unknown') is None
        assert storage.calls == []


class TestTeardown:
    """invalidate / clear."""

    def test_invalidate_forces_new_request(self, links, storage):
        links.get_link('exp-1', 'path')

        links.invalidate('exp-1')
        links.get_link('exp-1', 'path')

        assert len(storage.calls) == 2

    def test_result_of_invalidated_request_is_discarded(self, clock):
        holder = {}

        def fetch(record_id):
            holder['links'].invalidate(record_id)
            return SignedLink(url='https://storage.test/late', expires_at=clock() + timedelta(minutes=15))

        links = ReceiptLinkMaterializer(fetch, clock=clock, safety_margin=timedelta(0), default_ttl=timedelta(minutes=15))
        holder['links'] = links

        assert links.get_link('exp-1', 'path') is None
        assert 'exp-1' not in links

    def test_clear(self, links):
        links.get_link('exp-1', 'a')
        links.get_link('exp-2', 'b')

        links.clear()

        assert len(links) == 0
