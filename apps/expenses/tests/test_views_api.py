"""
Tests for expenses API views, including the refresh-receipt-url routes.
"""
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.constants import ExpenseStatus, Roles
from apps.donations.tests.factories import age_record
from apps.expenses.models import Expense
from apps.expenses.receipt_links import SignedLink
from apps.expenses.storage import ReceiptStorageError
from apps.members.tests.factories import MemberFactory, UserFactory

from .factories import ApprovedExpenseFactory, ExpenseFactory, ExpenseWithReceiptFactory

LIST_URL = '/api/v1/expenses/expenses/'
REFRESH_URLS = [
    '/api/expenses/refresh-receipt-url',
    '/api/v1/expenses/expenses/refresh-receipt-url/',
]


def make_member_with_user(role=Roles.MEMBER):
    user = UserFactory()
    member = MemberFactory(user=user, role=role)
    return user, member


def make_api_client(user=None):
    client = APIClient()
    if user:
        client.force_authenticate(user=user)
    return client


def detail_url(expense, suffix=''):
    return f'{LIST_URL}{expense.pk}/{suffix}'


@pytest.fixture
def storage():
    mock_storage = MagicMock()
    mock_storage.upload.return_value = 'church/receipts/u/1_receipt.pdf'
    mock_storage.create_signed_url.return_value = SignedLink(
        url='https://storage.test/signed?token=1',
        expires_at=timezone.now() + timedelta(seconds=900),
    )
    with patch('apps.expenses.storage.get_receipt_storage', return_value=mock_storage):
        yield mock_storage


@pytest.mark.django_db
class TestExpenseList:
    """Tests for ExpenseViewSet list."""

    def test_unauthenticated(self):
        assert make_api_client().get(LIST_URL).status_code == status.HTTP_403_FORBIDDEN

    def test_member_sees_own_expenses(self):
        user, member = make_member_with_user()
        own = ExpenseFactory(submitter=member)
        other = ExpenseFactory()

        response = make_api_client(user).get(LIST_URL)

        ids = [e['id'] for e in response.data['results']]
        assert str(own.pk) in ids
        assert str(other.pk) not in ids

    def test_treasurer_sees_all(self):
        user, _ = make_member_with_user(Roles.TREASURER)
        ExpenseFactory()
        ExpenseFactory()

        response = make_api_client(user).get(LIST_URL)

        assert response.data['count'] == 2

    def test_detail_does_not_expose_stale_receipt_url(self):
        user, member = make_member_with_user()
        expense = ExpenseWithReceiptFactory(submitter=member, receipt_url='https://storage.test/old')

        response = make_api_client(user).get(detail_url(expense))

        assert response.status_code == status.HTTP_200_OK
        assert 'receipt_url' not in response.data
        assert response.data['has_receipt'] is True


@pytest.mark.django_db
class TestExpenseCreate:
    """Tests for ExpenseViewSet create."""

    def test_create_with_receipt(self, storage):
        user, member = make_member_with_user()
        receipt = SimpleUploadedFile('receipt.pdf', b'%PDF-1.4', content_type='application/pdf')

        response = make_api_client(user).post(LIST_URL, {
            'amount': '19.99',
            'category': 'supplies',
            'vendor': 'Staples',
            'receipt': receipt,
        }, format='multipart')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['receipt_path'] == 'church/receipts/u/1_receipt.pdf'
        assert response.data['status'] == ExpenseStatus.PENDING
        assert Expense.objects.get(pk=response.data['id']).submitter == member

    def test_invalid_receipt_type_rejected(self, storage):
        user, _ = make_member_with_user()
        receipt = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')

        response = make_api_client(user).post(LIST_URL, {
            'amount': '19.99',
            'receipt': receipt,
        }, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'receipt' in response.data
        storage.upload.assert_not_called()

    def test_upload_failure_returns_500(self, storage):
        storage.upload.side_effect = ReceiptStorageError('bucket missing')
        user, _ = make_member_with_user()
        receipt = SimpleUploadedFile('r.png', b'\x89PNG', content_type='image/png')

        response = make_api_client(user).post(LIST_URL, {
            'amount': '5.00',
            'receipt': receipt,
        }, format='multipart')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['details'] == 'bucket missing'
        assert not Expense.objects.exists()

    def test_user_without_member_profile(self):
        response = make_api_client(UserFactory()).post(LIST_URL, {'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestExpenseUpdate:
    """Tests for PATCH on an expense."""

    def test_submitter_patches_pending_expense(self):
        user, member = make_member_with_user()
        expense = ExpenseFactory(submitter=member)

        response = make_api_client(user).patch(detail_url(expense), {'vendor': 'Home Depot'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['vendor'] == 'Home Depot'

    def test_treasurer_cannot_patch_someone_elses_expense(self):
        user, _ = make_member_with_user(Roles.TREASURER)
        expense = ExpenseFactory()

        response = make_api_client(user).patch(detail_url(expense), {'vendor': 'X'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert 'error' in response.data

    def test_approved_expense_cannot_be_patched(self):
        user, member = make_member_with_user()
        expense = ApprovedExpenseFactory(submitter=member)

        response = make_api_client(user).patch(detail_url(expense), {'vendor': 'X'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_expired_window(self):
        user, member = make_member_with_user()
        expense = age_record(ExpenseFactory(submitter=member), days=2)

        response = make_api_client(user).patch(detail_url(expense), {'vendor': 'X'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_replace_receipt(self, storage):
        user, member = make_member_with_user()
        expense = ExpenseWithReceiptFactory(submitter=member)
        previous = expense.receipt_path
        receipt = SimpleUploadedFile('new.pdf', b'%PDF-1.4', content_type='application/pdf')

        response = make_api_client(user).patch(detail_url(expense), {'receipt': receipt}, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['receipt_path'] == 'church/receipts/u/1_receipt.pdf'
        storage.remove.assert_called_once_with(previous)

    def test_put_not_allowed(self):
        user, member = make_member_with_user()
        expense = ExpenseFactory(submitter=member)

        response = make_api_client(user).put(detail_url(expense), {'vendor': 'X'}, format='json')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


@pytest.mark.django_db
class TestExpenseEditabilityAndReview:
    """editability, approve, reject and destroy."""

    def test_editability(self):
        user, member = make_member_with_user()
        expense = ExpenseFactory(submitter=member)

        response = make_api_client(user).get(detail_url(expense, 'editability/'))

        assert response.data['editable'] is True
        assert response.data['remaining'] is not None

    def test_approved_is_locked(self):
        user, member = make_member_with_user()
        expense = ApprovedExpenseFactory(submitter=member)

        response = make_api_client(user).get(detail_url(expense, 'editability/'))

        assert response.data == {'editable': False, 'remaining': None, 'remaining_seconds': None}

    def test_treasurer_approves(self):
        user, treasurer = make_member_with_user(Roles.TREASURER)
        expense = ExpenseFactory()

        response = make_api_client(user).post(detail_url(expense, 'approve/'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == ExpenseStatus.APPROVED
        assert response.data['approver'] == treasurer.pk

    def test_member_cannot_approve_own(self):
        user, member = make_member_with_user()
        expense = ExpenseFactory(submitter=member)

        response = make_api_client(user).post(detail_url(expense, 'reject/'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_finance_staff_soft_deletes(self):
        user, _ = make_member_with_user(Roles.ADMIN)
        expense = ExpenseFactory()

        response = make_api_client(user).delete(detail_url(expense))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert Expense.all_objects.get(pk=expense.pk).is_deleted


@pytest.mark.django_db
@pytest.mark.parametrize('url', REFRESH_URLS)
class TestRefreshReceiptUrl:
    """POST {expenseId} -> {receiptUrl, expiresAt} | {error}"""

    def test_submitter_gets_fresh_link(self, url, storage):
        user, member = make_member_with_user()
        expense = ExpenseWithReceiptFactory(submitter=member)

        response = make_api_client(user).post(url, {'expenseId': str(expense.pk)}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['receiptUrl'] == 'https://storage.test/signed?token=1'
        assert response.data['expiresAt'] == storage.create_signed_url.return_value.expires_at.isoformat()
        storage.create_signed_url.assert_called_once_with(expense.receipt_path, 900)
        expense.refresh_from_db()
        assert expense.receipt_url == 'https://storage.test/signed?token=1'

    def test_finance_staff_gets_link(self, url, storage):
        user, _ = make_member_with_user(Roles.TREASURER)
        expense = ExpenseWithReceiptFactory()

        response = make_api_client(user).post(url, {'expenseId': str(expense.pk)}, format='json')

        assert response.status_code == status.HTTP_200_OK

    def test_missing_expense_id(self, url, storage):
        user, _ = make_member_with_user()

        response = make_api_client(user).post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'Missing expense ID'}

    def test_unknown_expense(self, url, storage):
        user, _ = make_member_with_user()

        response = make_api_client(user).post(
            url, {'expenseId': '00000000-0000-0000-0000-000000000000'}, format='json',
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_malformed_expense_id(self, url, storage):
        user, _ = make_member_with_user()

        response = make_api_client(user).post(url, {'expenseId': 'not-a-uuid'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_other_members_expense_forbidden(self, url, storage):
        user, _ = make_member_with_user()
        expense = ExpenseWithReceiptFactory()

        response = make_api_client(user).post(url, {'expenseId': str(expense.pk)}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        storage.create_signed_url.assert_not_called()

    def test_expense_without_receipt(self, url, storage):
        user, member = make_member_with_user()
        expense = ExpenseFactory(submitter=member)

        response = make_api_client(user).post(url, {'expenseId': str(expense.pk)}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert 'error' in response.data

    def test_storage_failure(self, url, storage):
        storage.create_signed_url.side_effect = ReceiptStorageError('Object not found')
        user, member = make_member_with_user()
        expense = ExpenseWithReceiptFactory(submitter=member)

        response = make_api_client(user).post(url, {'expenseId': str(expense.pk)}, format='json')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {
            'error': 'Failed to generate signed URL for receipt',
            'details': 'Object not found',
        }

    def test_unauthenticated(self, url, storage):
        response = make_api_client().post(url, {'expenseId': 'x'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
