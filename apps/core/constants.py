"""Centralized constants and choices for the application."""
from django.utils.translation import gettext_lazy as _


class Roles:
    """Member role definitions."""
    MEMBER = 'member'
    VOLUNTEER = 'volunteer'
    TREASURER = 'treasurer'
    PASTOR = 'pastor'
    ADMIN = 'admin'

    CHOICES = [
        (MEMBER, _('Member')),
        (VOLUNTEER, _('Volunteer')),
        (TREASURER, _('Treasurer')),
        (PASTOR, _('Pastor')),
        (ADMIN, _('Administrator')),
    ]

    # Permission groups for access control
    FINANCE_ROLES = [TREASURER, PASTOR, ADMIN]
    STAFF_ROLES = [PASTOR, ADMIN]


class RecordSource:
    """Where a financial record came from. Only manual entries may be edited."""
    MANUAL = 'manual'
    STRIPE = 'stripe'

    CHOICES = [
        (MANUAL, _('Manual entry')),
        (STRIPE, _('Stripe')),
    ]

    PROCESSOR_SOURCES = [STRIPE]


class DonationStatus:
    """Lifecycle of a donation transaction."""
    PENDING = 'pending'
    PROCESSING = 'processing'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    CANCELED = 'canceled'

    CHOICES = [
        (PENDING, _('Pending')),
        (PROCESSING, _('Processing')),
        (SUCCEEDED, _('Succeeded')),
        (FAILED, _('Failed')),
        (CANCELED, _('Canceled')),
    ]


class ExpenseStatus:
    """Approval workflow of a submitted expense."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    CHOICES = [
        (PENDING, _('Pending')),
        (APPROVED, _('Approved')),
        (REJECTED, _('Rejected')),
    ]


class DonationType:
    """Donation categories for financial tracking."""
    TITHE = 'tithe'
    OFFERING = 'offering'
    SPECIAL = 'special'
    CAMPAIGN = 'campaign'
    BUILDING = 'building'
    MISSIONS = 'missions'
    OTHER = 'other'

    CHOICES = [
        (TITHE, _('Tithe')),
        (OFFERING, _('General offering')),
        (SPECIAL, _('Special offering')),
        (CAMPAIGN, _('Campaign')),
        (BUILDING, _('Building fund')),
        (MISSIONS, _('Missions')),
        (OTHER, _('Other')),
    ]


class PaymentMethod:
    """Accepted payment methods."""
    CASH = 'cash'
    CHECK = 'check'
    CARD = 'card'
    BANK_TRANSFER = 'bank_transfer'
    ONLINE = 'online'
    OTHER = 'other'

    CHOICES = [
        (CASH, _('Cash')),
        (CHECK, _('Check')),
        (CARD, _('Credit/Debit card')),
        (BANK_TRANSFER, _('Bank transfer')),
        (ONLINE, _('Online')),
        (OTHER, _('Other')),
    ]


class ExpenseCategory:
    """Spending categories for church expenses."""
    UTILITIES = 'utilities'
    SUPPLIES = 'supplies'
    MAINTENANCE = 'maintenance'
    MINISTRY = 'ministry'
    EVENTS = 'events'
    SALARIES = 'salaries'
    MISSIONS = 'missions'
    OTHER = 'other'

    CHOICES = [
        (UTILITIES, _('Utilities')),
        (SUPPLIES, _('Supplies')),
        (MAINTENANCE, _('Maintenance')),
        (MINISTRY, _('Ministry')),
        (EVENTS, _('Events')),
        (SALARIES, _('Salaries')),
        (MISSIONS, _('Missions')),
        (OTHER, _('Other')),
    ]


# Receipt uploads accepted by the expense endpoints
RECEIPT_CONTENT_TYPES = [
    'image/jpeg',
    'image/jpg',
    'image/png',
    'image/gif',
    'image/webp',
    'application/pdf',
]
