from rest_framework import serializers
from apps.accounts.serializers import UserMinimalSerializer
from .models import PurchaseReservation


class ReservationSerializer(serializers.ModelSerializer):
    """Serializer for a reservation returned to its holder."""

    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = PurchaseReservation
        fields = ['id', 'item', 'user', 'reserved_at', 'expires_at']
        read_only_fields = fields


class ReleaseResponseSerializer(serializers.Serializer):
    released = serializers.BooleanField()
