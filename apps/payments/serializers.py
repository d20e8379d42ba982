"""Serializers for online giving."""
from rest_framework import serializers

from apps.core.constants import DonationType


class CreatePaymentIntentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=1)
    donation_type = serializers.ChoiceField(choices=DonationType.CHOICES, default=DonationType.OFFERING)
    currency = serializers.ChoiceField(choices=['CAD', 'USD', 'EUR'], default='CAD')
