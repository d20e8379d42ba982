"""Tests for the donation details drawer."""
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest.mock import MagicMock

import pytest
import requests
from django.utils import timezone

from apps.core.api_client import ApiClientError, ChurchApiClient
from apps.core.drawers import DrawerState, DrawerStateError, EditState
from apps.core.edit_window import EditWindowPolicy
from apps.donations.drawers import DonationDrawer, load_donation

from .factories import DonationFactory, StripeDonationFactory


def policy_at(now, minutes=60):
    return EditWindowPolicy(timedelta(minutes=minutes), clock=lambda: now)


@pytest.mark.django_db
class TestDonationDrawer:
    """Tests for DonationDrawer backed by the ORM loader."""

    def test_open_manual_donation_is_editable(self):
        donation = DonationFactory()
        drawer = DonationDrawer(load_donation, policy_at(donation.created_at + timedelta(minutes=5)))

        drawer.open(donation.pk)

        state = drawer.view_state()
        assert state['state'] == DrawerState.LOADED
        assert state['edit_state'] == EditState.EDITABLE
        assert state['remaining'] == '55 minutes'
        assert state['is_manual'] is True

    def test_stripe_donation_is_locked(self):
        donation = StripeDonationFactory()
        drawer = DonationDrawer(load_donation, policy_at(donation.created_at + timedelta(minutes=1)))

        drawer.open(donation.pk)

        assert drawer.edit_state == EditState.LOCKED
        assert drawer.view_state()['remaining'] is None
        assert drawer.view_state()['is_manual'] is False

    def test_unknown_donation_shows_error(self):
        drawer = DonationDrawer(load_donation)

        drawer.open('00000000-0000-0000-0000-000000000000')

        assert drawer.state == DrawerState.ERROR
        assert drawer.error == 'Donation not found.'
        assert drawer.edit_state is None

    def test_malformed_id_shows_error(self):
        drawer = DonationDrawer(load_donation)

        drawer.open('not-a-uuid')

        assert drawer.state == DrawerState.ERROR
        assert drawer.error == 'Donation not found.'

    def test_window_closes_while_open(self):
        donation = DonationFactory()
        now = {'value': donation.created_at + timedelta(minutes=59)}
        policy = EditWindowPolicy(timedelta(minutes=60), clock=lambda: now['value'])
        drawer = DonationDrawer(load_donation, policy).open(donation.pk)
        assert drawer.edit_state == EditState.EDITABLE

        now['value'] = donation.created_at + timedelta(minutes=61)

        assert drawer.view_state()['edit_state'] == EditState.LOCKED
        with pytest.raises(DrawerStateError):
            drawer.start_editing()

    def test_edit_cycle(self):
        donation = DonationFactory()
        drawer = DonationDrawer(load_donation, policy_at(timezone.now())).open(donation.pk)

        drawer.start_editing()
        assert drawer.edit_state == EditState.EDITING

        drawer.cancel_editing()
        assert drawer.edit_state == EditState.EDITABLE

        drawer.start_editing()
        donation.notes = 'Updated'
        drawer.finish_editing(donation)
        assert drawer.record.notes == 'Updated'
        assert drawer.edit_state == EditState.EDITABLE

    def test_close_resets(self):
        donation = DonationFactory()
        drawer = DonationDrawer(load_donation).open(donation.pk)

        drawer.close()

        assert drawer.view_state() == {
            'state': DrawerState.CLOSED,
            'record_id': None,
            'error': None,
            'edit_state': None,
            'editable': False,
            'remaining': None,
            'is_manual': False,
        }


class TestDonationDrawerWithApiLoader:
    """Drawer fed by ChurchApiClient-style loaders."""

    def test_api_error_message_is_shown(self):
        def failing_loader(donation_id):
            raise ApiClientError('Server unavailable', status_code=503)

        drawer = DonationDrawer(failing_loader, policy_at(timezone.now()))
        drawer.open('abc')

        assert drawer.state == DrawerState.ERROR
        assert drawer.error == 'Server unavailable'

    def test_empty_api_response_shows_error(self):
        session = MagicMock(spec=requests.Session)
        response = MagicMock(status_code=200, ok=True)
        response.json.return_value = {}
        session.get.return_value = response
        client = ChurchApiClient('https://church.example.org', session=session)

        drawer = DonationDrawer(client.get_donation, policy_at(timezone.now()))
        drawer.open('abc')

        assert drawer.state == DrawerState.ERROR
        assert drawer.error == 'The server returned no donation.'

    def test_naive_api_timestamp_is_read_as_utc(self):
        created_at = datetime(2026, 3, 1, 11, 55)
        session = MagicMock(spec=requests.Session)
        response = MagicMock(status_code=200, ok=True)
        response.json.return_value = {
            'id': 'abc',
            'source': 'manual',
            'status': 'succeeded',
            'created_at': created_at.isoformat(),
        }
        session.get.return_value = response
        client = ChurchApiClient('https://church.example.org', session=session)
        now = datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc)

        drawer = DonationDrawer(client.get_donation, policy_at(now)).open('abc')

        assert drawer.edit_state == EditState.EDITABLE
        assert drawer.view_state()['remaining'] == '55 minutes'

    def test_start_editing_requires_loaded_record(self):
        drawer = DonationDrawer(lambda pk: None, policy_at(timezone.now()))

        with pytest.raises(DrawerStateError):
            drawer.start_editing()
