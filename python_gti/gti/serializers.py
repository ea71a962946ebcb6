"""
Request validation for the GTI export/receive API.
"""
from django.conf import settings
from rest_framework import serializers

from gti.services.events import MAX_CURSOR


class ExportQuerySerializer(serializers.Serializer):
    """Query string of GET /export."""

    cursor = serializers.IntegerField(required=False, min_value=0, max_value=MAX_CURSOR, default=0)
    limit = serializers.IntegerField(required=False, min_value=1)

    def validate_limit(self, value):
        max_limit = settings.GTI_EXPORT_MAX_LIMIT
        if value > max_limit:
            raise serializers.ValidationError(f"limit must be between 1 and {max_limit}")
        return value


class ReceiveSerializer(serializers.Serializer):
    """Body of POST /receive."""

    idempotencyKey = serializers.CharField(max_length=128)
    status = serializers.ChoiceField(
        choices=['confirmed', 'received', 'duplicate'],
        required=False,
        default='confirmed',
    )
    note = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
