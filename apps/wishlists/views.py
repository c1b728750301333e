from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import OpenApiParameter, extend_schema

from apps.core.responses import error_response, result_response
from apps.core.types import Principal, ResourceType
from apps.sharing.permissions import resource_role

from .serializers import (
    ItemSerializer,
    ListFilterSerializer,
    ListSummarySerializer,
    LocationSummarySerializer,
    WishListSerializer,
)
from .services import get_accessible_lists, get_list_items, get_list_summary, get_location_summary


GUEST_TOKEN_PARAMETER = OpenApiParameter(
    name='X-Guest-Token',
    location=OpenApiParameter.HEADER,
    required=False,
    description='Guest access token from a share link.',
)


@extend_schema(
    parameters=[ListFilterSerializer, GUEST_TOKEN_PARAMETER],
    responses={200: WishListSerializer(many=True)},
    description="Get all lists the caller can view, with their access level.",
    tags=['lists'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def accessible_lists(request):
    """Get all lists visible to the caller."""
    filter_serializer = ListFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)

    lists = get_accessible_lists(
        principal=Principal.from_request(request),
        year=filter_serializer.validated_data.get('year'),
    )
    serializer = WishListSerializer(lists, many=True)
    return Response(serializer.data)


@extend_schema(
    parameters=[GUEST_TOKEN_PARAMETER],
    responses={200: ListSummarySerializer},
    description="Item count and value of a list. Purchase totals are hidden from the list owner.",
    tags=['lists'],
)
@api_view(['GET'])
@permission_classes([resource_role(ResourceType.LIST, 'list_id')])
def list_summary(request, list_id):
    """Get totals for one list."""
    result = get_list_summary(principal=Principal.from_request(request), list_id=list_id)
    return result_response(result, ListSummarySerializer)


@extend_schema(
    parameters=[GUEST_TOKEN_PARAMETER],
    responses={200: ItemSerializer(many=True)},
    description="Items of a list. Purchase and reservation state is hidden from the list owner.",
    tags=['lists'],
)
@api_view(['GET'])
@permission_classes([resource_role(ResourceType.LIST, 'list_id')])
def list_items(request, list_id):
    """Get the items of one list."""
    principal = Principal.from_request(request)
    result = get_list_items(principal=principal, list_id=list_id)
    if not result.ok:
        return error_response(result)

    serializer = ItemSerializer(result.value, many=True, context={'request': request, 'principal': principal})
    return Response(serializer.data)


@extend_schema(
    responses={200: LocationSummarySerializer},
    description="List, item and member counts of a location. Purchases on your own lists are not counted.",
    tags=['locations'],
)
@api_view(['GET'])
@permission_classes([resource_role(ResourceType.LOCATION, 'location_id')])
def location_summary(request, location_id):
    """Get counts for one location."""
    result = get_location_summary(principal=Principal.from_request(request), location_id=location_id)
    return result_response(result, LocationSummarySerializer)
