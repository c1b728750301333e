from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.core.responses import error_response, result_response
from apps.core.types import Principal
from apps.wishlists.serializers import ItemSerializer

from .serializers import ReleaseResponseSerializer, ReservationSerializer
from .services import confirm_purchase, release, reserve, unmark_purchase


def _item_response(request, principal, result):
    if not result.ok:
        return error_response(result)
    serializer = ItemSerializer(result.value, context={'request': request, 'principal': principal})
    return Response(serializer.data)


@extend_schema(
    request=None,
    responses={201: ReservationSerializer},
    description="Reserve an item. Calling again refreshes your reservation.",
    tags=['purchases'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reserve_item(request, item_id):
    """Reserve an item for the current user."""
    result = reserve(principal=Principal.from_request(request), item_id=item_id)
    return result_response(result, ReservationSerializer, success_status=status.HTTP_201_CREATED)


@extend_schema(
    request=None,
    responses={200: ItemSerializer},
    description="Confirm the purchase of an item you have reserved.",
    tags=['purchases'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def confirm_item_purchase(request, item_id):
    """Turn the current user's reservation into a purchase."""
    principal = Principal.from_request(request)
    return _item_response(request, principal, confirm_purchase(principal=principal, item_id=item_id))


@extend_schema(
    request=None,
    responses={200: ReleaseResponseSerializer},
    description="Release your reservation on an item.",
    tags=['purchases'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def release_item(request, item_id):
    """Release the current user's reservation."""
    result = release(principal=Principal.from_request(request), item_id=item_id)
    if not result.ok:
        return error_response(result)
    return Response({'released': result.value})


@extend_schema(
    request=None,
    responses={200: ItemSerializer},
    description="Mark a purchased item as available again (purchaser or list editor).",
    tags=['purchases'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def unmark_item_purchase(request, item_id):
    """Undo a purchase."""
    principal = Principal.from_request(request)
    return _item_response(request, principal, unmark_purchase(principal=principal, item_id=item_id))
