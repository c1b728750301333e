from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.core.responses import result_response
from apps.core.types import Principal, ResourceRef

from .access import check_access
from .serializers import (
    AccessCheckInputSerializer,
    AccessDecisionSerializer,
    AddMemberSerializer,
    BatchShareOutcomeSerializer,
    BatchShareSerializer,
    GuestLinkCreateSerializer,
    GuestLinkSerializer,
    InviteCodeSerializer,
    InviteCreateSerializer,
    InviteRedemptionSerializer,
    LocationMemberSerializer,
    RedeemInviteSerializer,
    ShareCreateSerializer,
    ShareSerializer,
)
from .services import (
    add_location_member,
    create_guest_link,
    create_invite_code,
    create_share,
    redeem_invite_code,
    remove_location_member,
    revoke_guest_link,
    revoke_share,
    share_with_many,
)


def _resource(data):
    return ResourceRef(data['resource_type'], data['resource_id'])


@extend_schema(
    request=AccessCheckInputSerializer,
    responses={200: AccessDecisionSerializer},
    description="Check whether the caller (user and/or guest token) holds a role on a resource.",
    tags=['access'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def access_check(request):
    """Resolve the caller's effective role on a resource."""
    serializer = AccessCheckInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    decision = check_access(Principal.from_request(request), _resource(data), data['required_role'])
    return Response(AccessDecisionSerializer(decision).data)


@extend_schema(
    request=ShareCreateSerializer,
    responses={201: ShareSerializer},
    description="Share a location or list with a user (owner only). Re-sharing replaces the role.",
    tags=['sharing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def share_create(request):
    """Create or update a share."""
    serializer = ShareCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = create_share(
        principal=Principal.from_request(request),
        resource=_resource(data),
        grantee_id=data['grantee_id'],
        role=data['role'],
        expires_at=data.get('expires_at'),
    )
    return result_response(result, ShareSerializer, success_status=status.HTTP_201_CREATED)


@extend_schema(
    request=None,
    responses={204: None},
    description="Revoke a share you created.",
    tags=['sharing'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def share_revoke(request, share_id):
    """Revoke a share."""
    result = revoke_share(principal=Principal.from_request(request), share_id=share_id)
    return result_response(result)


@extend_schema(
    request=BatchShareSerializer,
    responses={200: BatchShareOutcomeSerializer(many=True)},
    description="Share with several users by email. Each address succeeds or fails on its own.",
    tags=['sharing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def share_batch(request):
    """Share a resource with many users."""
    serializer = BatchShareSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = share_with_many(
        principal=Principal.from_request(request),
        resource=_resource(data),
        emails=data['emails'],
        role=data['role'],
        expires_at=data.get('expires_at'),
    )
    return result_response(result, BatchShareOutcomeSerializer, many=True)


@extend_schema(
    methods=['POST'],
    request=GuestLinkCreateSerializer,
    responses={201: GuestLinkSerializer},
    description="Mint a new guest link for a list, replacing any previous one (owner only).",
    tags=['sharing'],
)
@extend_schema(
    methods=['DELETE'],
    request=None,
    responses={204: None},
    description="Revoke the list's guest link (owner only).",
    tags=['sharing'],
)
@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def guest_link(request, list_id):
    """Create or revoke a list's guest link."""
    principal = Principal.from_request(request)

    if request.method == 'DELETE':
        result = revoke_guest_link(principal=principal, list_id=list_id)
        if result.ok:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return result_response(result)

    serializer = GuestLinkCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = create_guest_link(
        principal=principal,
        list_id=list_id,
        expires_at=serializer.validated_data.get('expires_at'),
    )
    return result_response(result, GuestLinkSerializer, success_status=status.HTTP_201_CREATED)


@extend_schema(
    request=InviteCreateSerializer,
    responses={201: InviteCodeSerializer},
    description="Create an invite code for a location or list (owner only).",
    tags=['sharing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invite_create(request):
    """Create an invite code."""
    serializer = InviteCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = create_invite_code(
        principal=Principal.from_request(request),
        resource=_resource(data),
        default_role=data['default_role'],
        max_uses=data['max_uses'],
        expires_at=data.get('expires_at'),
    )
    return result_response(result, InviteCodeSerializer, success_status=status.HTTP_201_CREATED)


@extend_schema(
    request=RedeemInviteSerializer,
    responses={200: InviteRedemptionSerializer},
    description="Redeem an invite code for the current user.",
    tags=['sharing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invite_redeem(request):
    """Redeem an invite code."""
    serializer = RedeemInviteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = redeem_invite_code(
        principal=Principal.from_request(request),
        code=serializer.validated_data['code'],
    )
    return result_response(result, InviteRedemptionSerializer)


@extend_schema(
    request=AddMemberSerializer,
    responses={201: LocationMemberSerializer},
    description="Add a member to a location or change their role (owner only).",
    tags=['sharing'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def member_add(request, location_id):
    """Add or update a location member."""
    serializer = AddMemberSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = add_location_member(
        principal=Principal.from_request(request),
        location_id=location_id,
        user_id=serializer.validated_data['user_id'],
        role=serializer.validated_data['role'],
    )
    return result_response(result, LocationMemberSerializer, success_status=status.HTTP_201_CREATED)


@extend_schema(
    request=None,
    responses={204: None},
    description="Remove a member from a location (owner, or the member leaving).",
    tags=['sharing'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def member_remove(request, location_id, user_id):
    """Remove a location member."""
    result = remove_location_member(
        principal=Principal.from_request(request),
        location_id=location_id,
        user_id=user_id,
    )
    return result_response(result)
