"""Celery tasks for the payments app."""
import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def cleanup_pending_donations():
    """Weekly task settling Stripe donations left pending for more than a week."""
    from apps.payments.services import PaymentService

    summary = PaymentService.reconcile_pending_donations()
    return {
        'checked': summary['checked'],
        'updated': summary['updated'],
        'canceled': summary['canceled'],
        'errors': len(summary['errors']),
    }
