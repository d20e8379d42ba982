"""API views for payments."""
import json
import logging

import stripe as stripe_sdk
from django.conf import settings
from django.http import HttpResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import CreatePaymentIntentSerializer
from .services import PaymentService, get_stripe

logger = logging.getLogger(__name__)


class CreatePaymentIntentView(APIView):
    """Start an online gift: creates the PaymentIntent and a pending donation."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        member = getattr(request.user, 'member_profile', None)
        if member is None:
            return Response(
                {'error': 'A member profile is required to give online.'},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = CreatePaymentIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        donation, client_secret = PaymentService.create_payment_intent(
            member=member,
            amount=serializer.validated_data['amount'],
            donation_type=serializer.validated_data['donation_type'],
            currency=serializer.validated_data['currency'],
        )

        return Response({
            'donation_id': str(donation.pk),
            'client_secret': client_secret,
            'stripe_public_key': getattr(settings, 'STRIPE_PUBLIC_KEY', ''),
        }, status=status.HTTP_201_CREATED)


@method_decorator(csrf_exempt, name='dispatch')
class StripeWebhookView(View):
    """Receives Stripe webhook events."""

    def post(self, request):
        payload = request.body
        sig_header = request.META.get('HTTP_STRIPE_SIGNATURE', '')
        webhook_secret = getattr(settings, 'STRIPE_WEBHOOK_SECRET', '')

        stripe = get_stripe()

        if stripe and webhook_secret:
            try:
                event = stripe.Webhook.construct_event(
                    payload, sig_header, webhook_secret
                )
            except (ValueError, stripe_sdk.SignatureVerificationError) as e:
                logger.error(f'Stripe webhook error: {e}')
                return HttpResponse(status=400)
        else:
            # Development mode - parse JSON directly
            try:
                event = json.loads(payload)
            except json.JSONDecodeError:
                return HttpResponse(status=400)

        event_type = event.get('type', '')
        data = event.get('data', {}).get('object', {})

        if event_type == 'payment_intent.succeeded':
            PaymentService.handle_payment_succeeded(payment_intent_id=data.get('id', ''))

        elif event_type == 'payment_intent.payment_failed':
            failure = data.get('last_payment_error') or {}
            PaymentService.handle_payment_failed(
                payment_intent_id=data.get('id', ''),
                failure_reason=failure.get('message', ''),
            )

        else:
            logger.debug(f'Ignoring Stripe event {event_type}')

        return HttpResponse(status=200)
