from django.core.exceptions import ObjectDoesNotExist
from django.utils import timezone
from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from apps.core.types import AccessRole
from .models import Item, WishList


# Never shown to the owner of the list the item belongs to
GIFT_SECRET_FIELDS = ('is_purchased', 'purchased_by', 'purchased_at', 'reservation')


class ListFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for list filtering.

    Query Parameters:
        year (int): Only lists for this year
    """

    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)


class WishListSerializer(serializers.ModelSerializer):
    """List with the caller's effective access level."""

    owner = UserMinimalSerializer(read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)
    access_level = serializers.ChoiceField(choices=AccessRole.choices, read_only=True)

    class Meta:
        model = WishList
        fields = [
            'id',
            'title',
            'description',
            'owner',
            'location',
            'location_name',
            'year',
            'is_active',
            'is_public',
            'access_level',
            'created_at',
        ]
        read_only_fields = fields


class ListSummarySerializer(serializers.Serializer):
    """
    Totals for one list.

    The purchase figures are absent from the payload for the list owner.
    """

    total_items = serializers.IntegerField()
    total_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    purchased_items = serializers.IntegerField(required=False)
    purchased_value = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    completion_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)


class ItemSerializer(serializers.ModelSerializer):
    """
    Item as seen by one principal.

    Pass the caller in ``context['principal']``. Purchase and reservation
    state is dropped when the caller owns the list, or when no principal
    is given at all.
    """

    purchased_by = UserMinimalSerializer(read_only=True)
    reservation = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = [
            'id',
            'list',
            'title',
            'description',
            'price',
            'currency',
            'url',
            'image_url',
            'priority',
            'quantity',
            'notes',
            'created_by',
            'is_purchased',
            'purchased_by',
            'purchased_at',
            'reservation',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def _hides_purchase_state(self, obj):
        principal = self.context.get('principal')
        if principal is None:
            return True
        return principal.user_id is not None and obj.list.owner_id == principal.user_id

    def get_reservation(self, obj):
        try:
            reservation = obj.reservation
        except ObjectDoesNotExist:
            return None

        if not reservation.is_live(timezone.now()):
            return None

        principal = self.context.get('principal')
        return {
            'reserved_by': reservation.user_id,
            'expires_at': reservation.expires_at,
            'is_mine': principal is not None and reservation.is_held_by(principal.user_id),
        }

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if self._hides_purchase_state(instance):
            for field in GIFT_SECRET_FIELDS:
                data.pop(field, None)
        return data


def project_item(item, principal):
    """Render one item for ``principal`` with gift secrecy applied."""
    return ItemSerializer(item, context={'principal': principal}).data


class LocationSummarySerializer(serializers.Serializer):
    """Counts for one location. Purchases on the caller's own lists are not counted."""

    total_lists = serializers.IntegerField()
    total_items = serializers.IntegerField()
    purchased_items = serializers.IntegerField()
    total_members = serializers.IntegerField()
