"""Expense operations: submission, submitter edits, review and receipt links."""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.constants import ExpenseStatus, RecordSource
from apps.core.edit_window import EditWindowPolicy

from . import storage as receipt_storage
from .models import Expense
from .storage import ReceiptStorageError

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ['amount', 'currency', 'expense_date', 'category', 'vendor', 'description']


class ExpenseNotEditable(Exception):
    """The editor is not the submitter, or the expense is settled or past its window."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ReceiptMissing(Exception):
    """The expense has no stored receipt to sign."""

    def __init__(self, message='No receipt path associated with this expense.'):
        super().__init__(message)
        self.message = message


def _church_prefix():
    return getattr(settings, 'CHURCH_STORAGE_PREFIX', 'church')


class ExpenseService:
    """Business logic around Expense records and their receipts."""

    @staticmethod
    def create_expense(submitter, data, receipt_file=None):
        """
        Create a pending manual expense for ``submitter``.

        The receipt is uploaded first; if the row cannot be written the
        uploaded file is removed again.
        """
        fields = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
        receipt_path = ''
        storage = None

        if receipt_file is not None:
            storage = receipt_storage.get_receipt_storage()
            receipt_path = storage.upload(receipt_file, _church_prefix(), submitter.pk)

        try:
            expense = Expense.objects.create(
                submitter=submitter,
                source=RecordSource.MANUAL,
                status=ExpenseStatus.PENDING,
                receipt_path=receipt_path,
                **fields,
            )
        except Exception:
            if receipt_path:
                ExpenseService._remove_quietly(storage, receipt_path)
            raise

        logger.info(f'Expense {expense.expense_number} submitted by {submitter.pk}')
        return expense

    @staticmethod
    def update_expense(expense, editor, data, receipt_file=None, remove_receipt=False, policy=None):
        """
        Apply a submitter edit.

        Only the submitter may edit, only while the expense is pending and
        inside the expense edit window. A new receipt replaces the old one,
        which is then deleted from storage; failing to delete it is logged.
        """
        if editor is None or expense.submitter_id != editor.pk:
            raise ExpenseNotEditable('You can only edit expenses you submitted.')

        if not expense.is_mutable_status:
            raise ExpenseNotEditable('Only pending expenses can be edited.')

        policy = policy or EditWindowPolicy.for_expenses()
        if not policy.evaluate(expense).editable:
            raise ExpenseNotEditable('This expense can no longer be edited. The edit window has expired.')

        previous_path = expense.receipt_path
        new_path = ''
        storage = None

        if receipt_file is not None:
            storage = receipt_storage.get_receipt_storage()
            new_path = storage.upload(receipt_file, _church_prefix(), editor.pk)
            expense.receipt_path = new_path
            expense.receipt_url = ''
        elif remove_receipt:
            expense.receipt_path = ''
            expense.receipt_url = ''

        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(expense, field, data[field])

        try:
            with transaction.atomic():
                expense.save()
        except Exception:
            if new_path:
                ExpenseService._remove_quietly(storage, new_path)
            raise

        if previous_path and previous_path != expense.receipt_path:
            storage = storage or receipt_storage.get_receipt_storage()
            ExpenseService._remove_quietly(storage, previous_path)

        logger.info(f'Expense {expense.expense_number} updated by {editor.pk}')
        return expense

    @staticmethod
    def review_expense(expense, reviewer, approved):
        """Approve or reject a pending expense. Settled expenses are locked."""
        if expense.status != ExpenseStatus.PENDING:
            raise ExpenseNotEditable('This expense has already been reviewed.')

        expense.status = ExpenseStatus.APPROVED if approved else ExpenseStatus.REJECTED
        expense.approver = reviewer
        expense.save(update_fields=['status', 'approver', 'updated_at'])

        logger.info(f'Expense {expense.expense_number} {expense.status} by {getattr(reviewer, "pk", None)}')
        return expense

    @staticmethod
    def refresh_receipt_url(expense, ttl_seconds=None):
        """
        Issue a fresh signed URL for the expense's receipt.

        The URL is stored on the expense for reference only; callers should
        rely on the returned link's ``expires_at``.
        """
        if not expense.receipt_path:
            raise ReceiptMissing()

        if ttl_seconds is None:
            ttl_seconds = getattr(settings, 'RECEIPT_SIGNED_URL_TTL_SECONDS', 900)

        link = receipt_storage.get_receipt_storage().create_signed_url(expense.receipt_path, ttl_seconds)

        expense.receipt_url = link.url
        expense.save(update_fields=['receipt_url', 'updated_at'])

        logger.info(
            f'Issued receipt link for expense {expense.expense_number}, '
            f'valid until {timezone.localtime(link.expires_at).isoformat()}'
        )
        return link

    @staticmethod
    def _remove_quietly(storage, path):
        try:
            storage.remove(path)
        except ReceiptStorageError as e:
            logger.warning(f'Failed to delete receipt at {path}: {e.message}')
