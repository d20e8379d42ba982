"""Donation details drawer: shows a donation and whether it can still be corrected."""
from apps.core.constants import RecordSource
from apps.core.drawers import RecordDrawer
from apps.core.edit_window import EditWindowPolicy


class DonationDrawer(RecordDrawer):
    """
    Drawer for a single donation.

    ``load_record`` is either ``ChurchApiClient.get_donation`` (remote UI) or
    ``load_donation`` below (server-side rendering).
    """

    not_found_message = 'Donation not found.'

    def __init__(self, load_record, policy=None):
        super().__init__(load_record, policy or EditWindowPolicy.for_donations())

    def view_state(self):
        state = super().view_state()
        record = self.record
        state['is_manual'] = bool(record is not None and record.source == RecordSource.MANUAL)
        return state


def load_donation(donation_id):
    from .models import Donation
    return Donation.objects.select_related('member').get(pk=donation_id)
