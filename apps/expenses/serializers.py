"""DRF serializers for expense API."""
from rest_framework import serializers

from apps.core.validators import validate_receipt_file

from .models import Expense


class ExpenseListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for expense lists."""

    submitter_name = serializers.CharField(source='submitter.full_name', read_only=True)
    category_display = serializers.CharField(source='get_category_display', read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'expense_number',
            'amount',
            'currency',
            'expense_date',
            'category',
            'category_display',
            'vendor',
            'status',
            'submitter',
            'submitter_name',
            'has_receipt',
            'created_at',
        ]


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Full expense serializer.

    ``receipt_url`` is deliberately absent: it expires, and clients ask for a
    fresh one through refresh-receipt-url.
    """

    submitter_name = serializers.CharField(source='submitter.full_name', read_only=True)
    approver_name = serializers.CharField(source='approver.full_name', read_only=True, allow_null=True)
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'expense_number',
            'amount',
            'currency',
            'expense_date',
            'category',
            'category_display',
            'vendor',
            'description',
            'source',
            'status',
            'status_display',
            'submitter',
            'submitter_name',
            'approver',
            'approver_name',
            'receipt_path',
            'has_receipt',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ExpenseWriteSerializer(serializers.ModelSerializer):
    """Fields a submitter provides, plus an optional receipt upload."""

    receipt = serializers.FileField(
        required=False,
        write_only=True,
        validators=[validate_receipt_file],
    )

    class Meta:
        model = Expense
        fields = [
            'amount',
            'currency',
            'expense_date',
            'category',
            'vendor',
            'description',
            'receipt',
        ]

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('The amount must be positive.')
        return value


class ExpenseUpdateSerializer(ExpenseWriteSerializer):
    """PATCH payload; ``remove_receipt`` drops the stored receipt."""

    remove_receipt = serializers.BooleanField(required=False, default=False, write_only=True)

    class Meta(ExpenseWriteSerializer.Meta):
        fields = ExpenseWriteSerializer.Meta.fields + ['remove_receipt']

    def validate(self, attrs):
        if attrs.get('receipt') and attrs.get('remove_receipt'):
            raise serializers.ValidationError('Upload a new receipt or remove the current one, not both.')
        return attrs
