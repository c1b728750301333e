from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from apps.core.types import AccessRole, ResourceType, ShareableResource
from .models import InviteCode, LocationMember, Share


# =============================================================================
# Input Serializers
# =============================================================================

class ResourceInputSerializer(serializers.Serializer):
    """A shareable resource named by type and id."""

    resource_type = serializers.ChoiceField(choices=ShareableResource.choices)
    resource_id = serializers.UUIDField()


class AccessCheckInputSerializer(serializers.Serializer):
    """
    Validate input for an access check.

    Fields:
        resource_type (str): location, list or item
        resource_id (UUID): Resource to check
        required_role (str): Role needed, defaults to viewer
    """

    resource_type = serializers.ChoiceField(choices=ResourceType.choices)
    resource_id = serializers.UUIDField()
    required_role = serializers.ChoiceField(choices=AccessRole.choices, default=AccessRole.VIEWER)


class ShareCreateSerializer(ResourceInputSerializer):
    grantee_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=AccessRole.choices, default=AccessRole.VIEWER)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class BatchShareSerializer(ResourceInputSerializer):
    emails = serializers.ListField(child=serializers.CharField(max_length=254), allow_empty=False, max_length=100)
    role = serializers.ChoiceField(choices=AccessRole.choices, default=AccessRole.VIEWER)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class GuestLinkCreateSerializer(serializers.Serializer):
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class InviteCreateSerializer(ResourceInputSerializer):
    default_role = serializers.ChoiceField(choices=AccessRole.choices, default=AccessRole.VIEWER)
    max_uses = serializers.IntegerField(min_value=1, default=1)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class RedeemInviteSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=16)


class AddMemberSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    role = serializers.ChoiceField(choices=AccessRole.choices, default=AccessRole.VIEWER)


# =============================================================================
# Output Serializers
# =============================================================================

class AccessDecisionSerializer(serializers.Serializer):
    granted = serializers.BooleanField()
    role = serializers.ChoiceField(choices=AccessRole.choices, allow_null=True)


class ShareSerializer(serializers.ModelSerializer):
    """Serializer for shares."""

    shared_with = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Share
        fields = [
            'id',
            'resource_type',
            'resource_id',
            'shared_by',
            'shared_with',
            'role',
            'expires_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class BatchShareOutcomeSerializer(serializers.Serializer):
    email = serializers.CharField()
    ok = serializers.BooleanField()
    share = ShareSerializer(allow_null=True)
    error = serializers.CharField(allow_null=True)
    message = serializers.CharField()


class GuestLinkSerializer(serializers.Serializer):
    """Returned once, to the owner who minted the link."""

    list_id = serializers.UUIDField()
    token = serializers.CharField()
    expires_at = serializers.DateTimeField(allow_null=True)


class InviteCodeSerializer(serializers.ModelSerializer):
    uses_left = serializers.IntegerField(read_only=True)

    class Meta:
        model = InviteCode
        fields = [
            'id',
            'code',
            'resource_type',
            'resource_id',
            'default_role',
            'max_uses',
            'use_count',
            'uses_left',
            'expires_at',
            'created_at',
        ]
        read_only_fields = fields


class InviteRedemptionSerializer(serializers.Serializer):
    resource_type = serializers.CharField(source='resource.type')
    resource_id = serializers.UUIDField(source='resource.id')
    role = serializers.ChoiceField(choices=AccessRole.choices)


class LocationMemberSerializer(serializers.ModelSerializer):
    user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = LocationMember
        fields = ['id', 'location', 'user', 'role', 'added_by', 'added_at']
        read_only_fields = fields
