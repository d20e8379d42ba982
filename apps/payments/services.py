"""Stripe payment service layer: intents, webhook outcomes and pending-donation reconciliation."""
import logging
import uuid
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import stripe as stripe_sdk
from django.conf import settings
from django.utils import timezone

from apps.core.constants import DonationStatus, DonationType, PaymentMethod, RecordSource

logger = logging.getLogger(__name__)

PENDING_CLEANUP_DAYS = 7

# PaymentIntent statuses meaning the donor abandoned or cannot complete the payment.
INCOMPLETE_STATUSES = {
    'canceled',
    'incomplete',
    'requires_payment_method',
    'requires_confirmation',
    'requires_action',
    'requires_source_action',
    'requires_source',
}


def get_stripe():
    """Get configured stripe module. Returns None if not configured."""
    stripe_sdk.api_key = getattr(settings, 'STRIPE_SECRET_KEY', '')
    if not stripe_sdk.api_key:
        return None
    return stripe_sdk


def _from_timestamp(value):
    if not value:
        return timezone.now()
    return datetime.fromtimestamp(value, tz=dt_timezone.utc)


def _target_status(stripe_status):
    if stripe_status == 'succeeded':
        return DonationStatus.SUCCEEDED
    if stripe_status in ('processing', 'requires_capture'):
        return DonationStatus.PROCESSING
    if stripe_status in INCOMPLETE_STATUSES:
        return DonationStatus.CANCELED
    return None


class PaymentService:
    """Manages Stripe payment operations. Stripe donations are never editable by hand."""

    @staticmethod
    def create_payment_intent(member, amount, donation_type=DonationType.OFFERING, currency='cad'):
        """Create a Stripe PaymentIntent and its pending Donation."""
        from apps.donations.models import Donation

        amount_decimal = Decimal(str(amount))

        stripe = get_stripe()
        if stripe:
            intent = stripe.PaymentIntent.create(
                amount=int(amount_decimal * 100),  # cents
                currency=currency.lower(),
                metadata={
                    'member_id': str(member.pk),
                    'donation_type': donation_type,
                },
                receipt_email=member.email or None,
                payment_method_types=['card'],
            )
            intent_id = intent.id
            client_secret = intent.client_secret
        else:
            # Development mode without Stripe
            intent_id = f'pi_dev_{uuid.uuid4().hex[:16]}'
            client_secret = f'{intent_id}_secret_dev'

        donation = Donation.objects.create(
            member=member,
            amount=amount_decimal,
            currency=currency.upper(),
            donation_type=donation_type,
            payment_method=PaymentMethod.ONLINE,
            source=RecordSource.STRIPE,
            status=DonationStatus.PENDING,
            transaction_id=intent_id,
        )

        logger.info(f'Created payment intent {intent_id} for donation {donation.donation_number}')
        return donation, client_secret

    @staticmethod
    def _get_donation(payment_intent_id):
        from apps.donations.models import Donation
        return Donation.objects.filter(transaction_id=payment_intent_id).first()

    @staticmethod
    def handle_payment_succeeded(payment_intent_id):
        """Handle successful payment webhook. Replays are no-ops."""
        donation = PaymentService._get_donation(payment_intent_id)
        if donation is None:
            logger.error(f'Donation not found for payment intent: {payment_intent_id}')
            return None

        if donation.status == DonationStatus.SUCCEEDED:
            return donation

        donation.status = DonationStatus.SUCCEEDED
        donation.processed_at = timezone.now()
        donation.save(update_fields=['status', 'processed_at', 'updated_at'])
        logger.info(f'Donation {donation.donation_number} succeeded')
        return donation

    @staticmethod
    def handle_payment_failed(payment_intent_id, failure_reason=''):
        """Handle failed payment webhook."""
        donation = PaymentService._get_donation(payment_intent_id)
        if donation is None:
            logger.error(f'Donation not found for payment intent: {payment_intent_id}')
            return None

        if donation.status == DonationStatus.SUCCEEDED:
            logger.warning(f'Ignoring failure event for settled donation {donation.donation_number}')
            return donation

        donation.status = DonationStatus.FAILED
        donation.processed_at = timezone.now()
        if failure_reason:
            donation.notes = failure_reason
        donation.save(update_fields=['status', 'processed_at', 'notes', 'updated_at'])
        logger.info(f'Donation {donation.donation_number} failed: {failure_reason}')
        return donation

    @staticmethod
    def reconcile_pending_donations(older_than_days=PENDING_CLEANUP_DAYS):
        """
        Settle stale pending Stripe donations against their PaymentIntent.

        Returns a summary dict: checked, updated, canceled, errors.
        """
        from apps.donations.models import Donation

        summary = {'checked': 0, 'updated': 0, 'canceled': 0, 'errors': []}

        stripe = get_stripe()
        if not stripe:
            logger.warning('Stripe is not configured; skipping pending donation cleanup')
            return summary

        cutoff = timezone.now() - timedelta(days=older_than_days)
        stale = Donation.objects.filter(
            source=RecordSource.STRIPE,
            status=DonationStatus.PENDING,
            created_at__lt=cutoff,
            transaction_id__isnull=False,
        )

        for donation in stale:
            summary['checked'] += 1
            intent_id = donation.transaction_id

            try:
                intent = stripe.PaymentIntent.retrieve(intent_id, expand=['latest_charge'])
            except stripe_sdk.StripeError as e:
                if getattr(e, 'code', None) == 'resource_missing':
                    logger.warning(f'PaymentIntent {intent_id} not found; canceling {donation.donation_number}')
                    PaymentService._settle(donation, DonationStatus.CANCELED, timezone.now())
                    summary['updated'] += 1
                    summary['canceled'] += 1
                    continue
                logger.error(f'Error retrieving PaymentIntent {intent_id}: {e}')
                summary['errors'].append({'id': str(donation.pk), 'payment_intent_id': intent_id, 'error': str(e)})
                continue

            target = _target_status(intent.status)
            if target is None or target == donation.status:
                logger.debug(f'No status change for {intent_id} ({intent.status})')
                continue

            processed_at = donation.processed_at
            if target == DonationStatus.CANCELED:
                processed_at = _from_timestamp(getattr(intent, 'canceled_at', None))
            elif target == DonationStatus.SUCCEEDED:
                charge = getattr(intent, 'latest_charge', None)
                processed_at = _from_timestamp(getattr(charge, 'created', None))

            PaymentService._settle(donation, target, processed_at)
            summary['updated'] += 1
            if target == DonationStatus.CANCELED:
                summary['canceled'] += 1

        logger.info(
            f'Pending donation cleanup: checked={summary["checked"]} '
            f'updated={summary["updated"]} canceled={summary["canceled"]} '
            f'errors={len(summary["errors"])}'
        )
        return summary

    @staticmethod
    def _settle(donation, status, processed_at):
        donation.status = status
        donation.processed_at = processed_at
        donation.save(update_fields=['status', 'processed_at', 'updated_at'])
