"""
Read-side list services: which lists a principal can see, list and
location totals, and list items.

Every function here goes through the access resolver, so a list is visible
exactly when ``check_access(..., 'viewer')`` would say so.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from uuid import UUID

from django.db.models import Q

from apps.core.results import service_result
from apps.core.types import AccessRole, Principal, ResourceRef, ShareableResource
from apps.sharing.access import effective_role, require_access
from apps.sharing.models import LocationMember, Share

from .models import Item, WishList

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def _candidate_lists(principal: Principal):
    """Lists the principal might see; the resolver makes the final call."""
    candidates = Q(is_public=True)

    if principal.guest_token:
        candidates |= Q(guest_access_token=principal.guest_token)

    if principal.is_authenticated:
        user_id = principal.user_id
        shares = Share.objects.filter(shared_with_id=user_id)
        candidates |= (
            Q(owner_id=user_id)
            | Q(location__owner_id=user_id)
            | Q(location_id__in=LocationMember.objects.filter(user_id=user_id).values('location_id'))
            | Q(id__in=shares.filter(resource_type=ShareableResource.LIST).values('resource_id'))
            | Q(location_id__in=shares.filter(resource_type=ShareableResource.LOCATION).values('resource_id'))
        )

    return WishList.objects.filter(candidates).select_related('owner', 'location').distinct()


def get_accessible_lists(*, principal: Principal, year: Optional[int] = None) -> List[WishList]:
    """
    Every list the principal can view, newest first.

    Each returned list carries its effective role as ``access_level``.
    """
    queryset = _candidate_lists(principal)
    if year is not None:
        queryset = queryset.filter(year=year)

    lists = []
    for wishlist in queryset.order_by('-created_at'):
        role = effective_role(principal, ResourceRef.list(wishlist.id))
        if role is None:
            continue
        wishlist.access_level = role
        lists.append(wishlist)
    return lists


def _percentage(part: int, whole: int) -> Decimal:
    if whole == 0:
        return Decimal('0.00')
    return (Decimal(part) * 100 / Decimal(whole)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@service_result
def get_list_summary(*, principal: Principal, list_id: UUID) -> dict:
    """
    Item count and value for a list.

    Purchase figures are included only for callers other than the list
    owner, so the owner can't work out what has been bought.

    Errors:
        not_found: List doesn't exist or is invisible to the caller
    """
    require_access(principal, ResourceRef.list(list_id), AccessRole.VIEWER)

    rows = list(Item.objects.filter(list_id=list_id).values_list('price', 'quantity', 'is_purchased'))
    line_totals = [((price or Decimal('0')) * quantity, is_purchased) for price, quantity, is_purchased in rows]

    summary = {
        'total_items': len(rows),
        'total_value': sum((total for total, _ in line_totals), Decimal('0')).quantize(TWO_PLACES),
    }

    owner_id = WishList.objects.filter(id=list_id).values_list('owner_id', flat=True).first()
    if principal.user_id is None or principal.user_id != owner_id:
        purchased = [total for total, is_purchased in line_totals if is_purchased]
        summary.update(
            purchased_items=len(purchased),
            purchased_value=sum(purchased, Decimal('0')).quantize(TWO_PLACES),
            completion_percentage=_percentage(len(purchased), len(rows)),
        )

    return summary


@service_result
def get_list_items(*, principal: Principal, list_id: UUID):
    """
    Items of a viewable list.

    Render them with ItemSerializer and the same principal so that gift
    secrecy is applied.

    Errors:
        not_found: List doesn't exist or is invisible to the caller
    """
    require_access(principal, ResourceRef.list(list_id), AccessRole.VIEWER)
    return (
        Item.objects
        .filter(list_id=list_id)
        .select_related('list', 'purchased_by', 'reservation')
    )


@service_result
def get_location_summary(*, principal: Principal, location_id: UUID) -> dict:
    """
    List, item and member counts for a location.

    ``purchased_items`` only counts items on lists the caller doesn't own,
    so a household member can't learn what has been bought for them.

    Errors:
        not_found: Location doesn't exist or is invisible to the caller
    """
    require_access(principal, ResourceRef.location(location_id), AccessRole.VIEWER)

    lists = WishList.objects.filter(location_id=location_id)
    items = Item.objects.filter(list__location_id=location_id)
    others_items = items.exclude(list__owner_id=principal.user_id) if principal.user_id else items

    return {
        'total_lists': lists.count(),
        'total_items': items.count(),
        'purchased_items': others_items.filter(is_purchased=True).count(),
        'total_members': LocationMember.objects.filter(location_id=location_id).count(),
    }
