"""DRF serializers for donation API."""
from rest_framework import serializers

from apps.core.constants import DonationType, PaymentMethod
from apps.members.models import Member

from .models import Donation


class DonationListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for donation lists."""

    member_name = serializers.CharField(source='member.full_name', read_only=True)
    donation_type_display = serializers.CharField(source='get_donation_type_display', read_only=True)

    class Meta:
        model = Donation
        fields = [
            'id',
            'donation_number',
            'member',
            'member_name',
            'amount',
            'currency',
            'donation_type',
            'donation_type_display',
            'payment_method',
            'date',
            'source',
            'status',
            'created_at',
        ]


class DonationSerializer(serializers.ModelSerializer):
    """Full donation serializer, including the edit audit trail."""

    member_name = serializers.CharField(source='member.full_name', read_only=True)
    donation_type_display = serializers.CharField(source='get_donation_type_display', read_only=True)
    payment_method_display = serializers.CharField(source='get_payment_method_display', read_only=True)
    recorded_by_name = serializers.CharField(source='recorded_by.full_name', read_only=True, allow_null=True)

    class Meta:
        model = Donation
        fields = [
            'id',
            'donation_number',
            'member',
            'member_name',
            'amount',
            'currency',
            'donation_type',
            'donation_type_display',
            'payment_method',
            'payment_method_display',
            'date',
            'notes',
            'source',
            'status',
            'processed_at',
            'transaction_id',
            'recorded_by',
            'recorded_by_name',
            'last_edited_at',
            'edit_reason',
            'original_amount',
            'edit_history',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ManualDonationCreateSerializer(serializers.ModelSerializer):
    """Serializer for the treasurer recording a cash, check or transfer gift."""

    class Meta:
        model = Donation
        fields = [
            'member',
            'amount',
            'currency',
            'donation_type',
            'payment_method',
            'date',
            'notes',
        ]

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('The amount must be positive.')
        return value


class DonationEditSerializer(serializers.Serializer):
    """Payload of POST /donations/{id}/edit/. A reason is always required."""

    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    date = serializers.DateField(required=False)
    member = serializers.PrimaryKeyRelatedField(queryset=Member.objects.all(), required=False)
    donation_type = serializers.ChoiceField(choices=DonationType.CHOICES, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    edit_reason = serializers.CharField(max_length=500)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('The amount must be positive.')
        return value

    def validate_edit_reason(self, value):
        if not value.strip():
            raise serializers.ValidationError('Please explain why this donation is being edited.')
        return value.strip()
