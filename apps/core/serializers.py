"""Serializers shared by the finance apps."""
from rest_framework import serializers


class EditWindowSerializer(serializers.Serializer):
    """Read-only projection of an EditWindowDecision."""

    editable = serializers.BooleanField()
    remaining = serializers.CharField(source='remaining_display', allow_null=True)
    remaining_seconds = serializers.IntegerField(allow_null=True)
