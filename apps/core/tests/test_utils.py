"""Tests for core utilities."""
import pytest
from django.utils import timezone

from apps.core.utils import generate_donation_number, generate_expense_number, sanitize_filename
from apps.donations.tests.factories import DonationFactory
from apps.expenses.tests.factories import ExpenseFactory


class TestSanitizeFilename:

    @pytest.mark.parametrize('name,expected', [
        ('receipt.pdf', 'receipt.pdf'),
        ('my receipt (1).jpg', 'my_receipt__1_.jpg'),
        ('facture-été_2026.png', 'facture-_t__2026.png'),
        ('../../etc/passwd', '.._.._etc_passwd'),
    ])
    def test_sanitize(self, name, expected):
        assert sanitize_filename(name) == expected


@pytest.mark.django_db
class TestNumberGeneration:

    def test_first_donation_number(self):
        month = timezone.now().strftime('%Y%m')
        assert generate_donation_number() == f'DON-{month}-0001'

    def test_donation_numbers_increment(self):
        first = DonationFactory()
        second = DonationFactory()

        assert int(second.donation_number.split('-')[-1]) == int(first.donation_number.split('-')[-1]) + 1

    def test_deleted_rows_still_count(self):
        expense = ExpenseFactory()
        expense.delete()

        assert generate_expense_number() != expense.expense_number
