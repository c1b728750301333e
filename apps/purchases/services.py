"""
Purchase Reservation Services
=============================

This module keeps two shoppers from buying the same gift.

Each item moves through a small state machine::

    Available --reserve--> Reserved(by, expires_at) --confirm_purchase--> Purchased(by, at)
        ^                        |                                            |
        +----release / expiry----+                                            |
        +-------------------------------unmark_purchase-----------------------+

A reservation is an advisory lock with a short TTL
(``settings.RESERVATION_TTL_MINUTES``). Confirmation must be preceded by a
reservation from the same user and re-checks ``is_purchased`` with a
conditional update, so concurrent confirmations resolve to exactly one
winner even if a reservation was lost along the way.

Gift secrecy: the owner of a list is refused every operation here, since
any answer (reserved, purchased, ...) would reveal what they are getting.

Example:
    Reserve, then buy::

        from apps.purchases.services import reserve, confirm_purchase

        result = reserve(principal=shopper, item_id=item.id)
        if result.ok:
            confirm_purchase(principal=shopper, item_id=item.id)
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.events import emit_change
from apps.core.exceptions import (
    AlreadyPurchasedError,
    AlreadyReservedError,
    ConflictError,
    ForbiddenError,
    NoReservationError,
    NotFoundError,
)
from apps.core.results import service_result
from apps.core.types import AccessRole, Principal, ResourceRef, role_rank
from apps.sharing.access import require_access
from apps.wishlists.models import Item, WishList

from .models import PurchaseReservation

logger = logging.getLogger(__name__)


def reservation_ttl() -> timedelta:
    return timedelta(minutes=settings.RESERVATION_TTL_MINUTES)


# The only two shapes the purchase columns may take. Transitions write them
# with queryset updates so the owner-visible updated_at stays put.

def _purchased_state(user_id, now) -> dict:
    return {'is_purchased': True, 'purchased_by_id': user_id, 'purchased_at': now}


def _available_state() -> dict:
    return {'is_purchased': False, 'purchased_by_id': None, 'purchased_at': None}


def get_live_reservation(item_id: UUID, now=None) -> Optional[PurchaseReservation]:
    """Return the item's reservation if it has not expired yet."""
    return PurchaseReservation.objects.live(now).filter(item_id=item_id).first()


def _lock_item(principal: Principal, item_id: UUID, required_role=AccessRole.VIEWER):
    """
    Lock an item row and authorize the caller against it.

    Returns:
        Tuple of (item, effective role, list owner id)

    Raises:
        NotFoundError: If the item doesn't exist or is invisible to the caller
        ForbiddenError: If the caller's role is below ``required_role``
    """
    try:
        item = Item.objects.select_for_update().get(id=item_id)
    except Item.DoesNotExist:
        raise NotFoundError("Item not found")

    role = require_access(principal, ResourceRef.item(item.id), required_role)
    list_owner_id = WishList.objects.filter(id=item.list_id).values_list('owner_id', flat=True).first()
    return item, role, list_owner_id


def _lock_item_for_shopper(principal: Principal, item_id: UUID):
    item, role, list_owner_id = _lock_item(principal, item_id)

    if not principal.is_authenticated:
        raise ForbiddenError("Sign in to reserve or buy items")
    if principal.user_id == list_owner_id:
        raise ForbiddenError("You cannot shop for your own list")
    return item


@service_result
@transaction.atomic
def reserve(*, principal: Principal, item_id: UUID) -> PurchaseReservation:
    """
    Reserve an item for the calling shopper.

    Re-reserving an item you already hold refreshes its TTL. An expired
    reservation held by someone else is taken over.

    Errors:
        not_found: Item doesn't exist or is invisible to the caller
        forbidden: Anonymous caller, or the caller owns the list
        already_purchased: Item is already bought
        already_reserved: Another shopper holds a live reservation
            (context: reserved_by, expires_at)
    """
    item = _lock_item_for_shopper(principal, item_id)

    if item.is_purchased:
        raise AlreadyPurchasedError(item_id=item.id)

    now = timezone.now()
    expires_at = now + reservation_ttl()

    reservation = PurchaseReservation.objects.select_for_update().filter(item=item).first()

    if reservation is not None and reservation.is_live(now) and not reservation.is_held_by(principal.user_id):
        raise AlreadyReservedError(
            reserved_by=reservation.user_id,
            expires_at=reservation.expires_at,
        )

    if reservation is None:
        try:
            with transaction.atomic():
                reservation = PurchaseReservation.objects.create(
                    item=item,
                    user_id=principal.user_id,
                    reserved_at=now,
                    expires_at=expires_at,
                )
        except IntegrityError:
            # Unique index on item_id: someone else inserted first
            holder = PurchaseReservation.objects.filter(item=item).values_list('user_id', flat=True).first()
            raise AlreadyReservedError(reserved_by=holder)
        action = 'created'
    else:
        refreshing = reservation.is_live(now) and reservation.is_held_by(principal.user_id)
        action = 'refreshed' if refreshing else 'created'
        if not refreshing:
            reservation.reserved_at = now
        reservation.user_id = principal.user_id
        reservation.expires_at = expires_at
        reservation.save(update_fields=['user', 'reserved_at', 'expires_at'])

    emit_change(
        'reservation',
        action,
        item.id,
        reserved_by=principal.user_id,
        expires_at=reservation.expires_at,
    )
    logger.info("Item %s reserved by %s until %s (%s)", item.id, principal.user_id, expires_at, action)
    return reservation


@service_result
@transaction.atomic
def confirm_purchase(*, principal: Principal, item_id: UUID) -> Item:
    """
    Turn the caller's live reservation into a committed purchase.

    In one transaction: require the reservation, flip ``is_purchased`` with a
    conditional update that only matches an unpurchased row, then drop the
    reservation.

    Errors:
        not_found / forbidden: As for reserve()
        no_reservation: Caller holds no live reservation on the item
        conflict: Another purchase committed first (context: purchased_by)
    """
    item = _lock_item_for_shopper(principal, item_id)
    now = timezone.now()

    reservation = (
        PurchaseReservation.objects
        .select_for_update()
        .filter(item=item, user_id=principal.user_id)
        .first()
    )
    if reservation is None or not reservation.is_live(now):
        raise NoReservationError()

    updated = (
        Item.objects
        .filter(id=item.id, is_purchased=False)
        .update(**_purchased_state(principal.user_id, now))
    )
    if updated == 0:
        purchased_by = Item.objects.filter(id=item.id).values_list('purchased_by_id', flat=True).first()
        logger.warning("Purchase conflict on item %s: already bought by %s", item.id, purchased_by)
        raise ConflictError(purchased_by=purchased_by)

    reservation.delete()
    item.refresh_from_db()

    emit_change(
        'item',
        'purchased',
        item.id,
        is_purchased=True,
        purchased_by=item.purchased_by_id,
        purchased_at=item.purchased_at,
    )
    logger.info("Item %s purchased by %s", item.id, principal.user_id)
    return item


@service_result
@transaction.atomic
def release(*, principal: Principal, item_id: UUID) -> bool:
    """
    Drop the caller's own reservation.

    Returns True if a reservation was removed. Releasing when you hold
    nothing, or when someone else holds the item, does nothing.
    """
    require_access(principal, ResourceRef.item(item_id), AccessRole.VIEWER)

    if not principal.is_authenticated:
        return False

    deleted, _ = (
        PurchaseReservation.objects
        .filter(item_id=item_id, user_id=principal.user_id)
        .delete()
    )
    if deleted:
        emit_change('reservation', 'released', item_id, released_by=principal.user_id)
        logger.info("Item %s released by %s", item_id, principal.user_id)
    return bool(deleted)


@service_result
@transaction.atomic
def unmark_purchase(*, principal: Principal, item_id: UUID) -> Item:
    """
    Return a purchased item to Available.

    Allowed for the original purchaser, or for anyone with editor access to
    the list other than its owner. A no-op on an item that isn't purchased.

    Errors:
        not_found: Item doesn't exist or is invisible to the caller
        forbidden: Caller is the list owner, or neither purchaser nor editor
    """
    item, role, list_owner_id = _lock_item(principal, item_id)

    if principal.user_id is not None and principal.user_id == list_owner_id:
        raise ForbiddenError("You cannot change purchases on your own list")

    is_purchaser = item.is_purchased and principal.user_id is not None and item.purchased_by_id == principal.user_id
    if not is_purchaser and role_rank(role) < role_rank(AccessRole.EDITOR):
        raise ForbiddenError("Only the purchaser or a list editor can unmark a purchase")

    if not item.is_purchased:
        return item

    previous_purchaser = item.purchased_by_id
    Item.objects.filter(id=item.id, is_purchased=True).update(**_available_state())
    item.refresh_from_db()

    emit_change('item', 'unpurchased', item.id, is_purchased=False, previous_purchaser=previous_purchaser)
    logger.info("Item %s unmarked by %s", item.id, principal.user_id)
    return item
