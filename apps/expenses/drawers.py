"""Expense details drawer: the record, its edit window and a viewable receipt link."""
from apps.core.drawers import DrawerState, RecordDrawer
from apps.core.edit_window import EditWindowPolicy

from .receipt_links import LinkState, ReceiptLinkError, ReceiptLinkMaterializer


class ExpenseDrawer(RecordDrawer):
    """
    Drawer for a single expense.

    ``fetch_link`` is the storage collaborator handed to the materializer,
    e.g. ``ChurchApiClient.fetch_receipt_link``. The link cache lives as long
    as the drawer and is invalidated when it closes.
    """

    not_found_message = 'Expense not found.'

    def __init__(self, load_record, fetch_link=None, policy=None, materializer=None):
        super().__init__(load_record, policy or EditWindowPolicy.for_expenses())
        if materializer is None:
            if fetch_link is None:
                raise ValueError('ExpenseDrawer needs fetch_link or a materializer.')
            materializer = ReceiptLinkMaterializer(fetch_link)
        self.links = materializer
        self.receipt_url = None
        self.receipt_error = None

    def _storage_ref(self):
        return getattr(self.record, 'receipt_path', None) or None

    def on_loaded(self):
        self.load_receipt()

    def on_close(self):
        if self.record_id is not None:
            self.links.invalidate(self.record_id)
        self.receipt_url = None
        self.receipt_error = None

    def load_receipt(self):
        """Ask the materializer for a link; errors are kept for display."""
        if self.state != DrawerState.LOADED:
            return None
        try:
            self.receipt_url = self.links.get_link(self.record_id, self._storage_ref())
        except ReceiptLinkError as e:
            self.receipt_url = None
            self.receipt_error = e.message
            return None
        self.receipt_error = self.links.error(self.record_id)
        return self.receipt_url

    def receipt_failed_to_load(self):
        """The displayed receipt did not render; request one replacement link."""
        if self.state != DrawerState.LOADED:
            return None
        try:
            url = self.links.report_load_failure(self.record_id)
        except ReceiptLinkError as e:
            self.receipt_url = None
            self.receipt_error = e.message
            return None

        self.receipt_url = url
        self.receipt_error = self.links.error(self.record_id)
        return url

    def receipt_loaded(self):
        self.links.report_loaded(self.record_id)

    def dismiss_receipt_error(self):
        if self.record_id is not None:
            self.links.dismiss_error(self.record_id)
        self.receipt_error = None

    def finish_editing(self, updated_record):
        super().finish_editing(updated_record)
        # A replaced receipt has a new storage ref; the materializer drops the old link.
        self.load_receipt()

    def view_state(self):
        # An expired link is re-requested on render; a valid one is a cache hit.
        if self.record_id is not None and self.links.state(self.record_id) == LinkState.EXPIRED:
            self.load_receipt()
        state = super().view_state()
        state.update({
            'has_receipt': bool(self._storage_ref()) if self.record is not None else False,
            'receipt_url': self.receipt_url,
            'receipt_error': self.receipt_error,
            'receipt_state': self.links.state(self.record_id) if self.record_id is not None else None,
        })
        return state


def load_expense(expense_id):
    from .models import Expense
    return Expense.objects.select_related('submitter').get(pk=expense_id)
