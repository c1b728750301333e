"""
Guest link service.

A guest link is an unguessable token giving anonymous read access to one
list. Minting a new link replaces the old one, so a list never has more
than one live token.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.events import emit_change
from apps.core.exceptions import ExpiredError
from apps.core.results import service_result
from apps.core.types import Principal, ResourceRef
from apps.wishlists.models import WishList

from .ownership import lock_owned_resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuestLink:
    list_id: UUID
    token: str = field(repr=False)
    expires_at: Optional[datetime] = None


def generate_guest_token() -> str:
    return secrets.token_hex(settings.GUEST_TOKEN_BYTES)


@service_result
@transaction.atomic
def create_guest_link(
    *,
    principal: Principal,
    list_id: UUID,
    expires_at: Optional[datetime] = None,
    max_retries: Optional[int] = None
) -> GuestLink:
    """
    Mint a fresh guest token for a list (owner only).

    Any previously issued token stops working as soon as this commits.

    Raises:
        RuntimeError: If a unique token cannot be generated after retries
    """
    wishlist = lock_owned_resource(principal, ResourceRef.list(list_id))

    if expires_at is not None and expires_at <= timezone.now():
        raise ExpiredError("Guest link expiry must be in the future")

    max_retries = max_retries or settings.INVITE_CODE_MAX_RETRIES
    for attempt in range(max_retries):
        token = generate_guest_token()
        try:
            with transaction.atomic():
                WishList.objects.filter(id=wishlist.id).update(
                    guest_access_token=token,
                    guest_access_expires_at=expires_at,
                    updated_at=timezone.now(),
                )
        except IntegrityError:
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique guest token after {max_retries} attempts"
                )
            continue

        emit_change('list', 'guest_link_created', wishlist.id, expires_at=expires_at)
        logger.info("Guest link rotated for list %s", wishlist.id)
        return GuestLink(list_id=wishlist.id, token=token, expires_at=expires_at)

    raise RuntimeError("Unexpected error in guest token generation")


@service_result
@transaction.atomic
def revoke_guest_link(*, principal: Principal, list_id: UUID) -> bool:
    """Invalidate the list's guest token. Returns False if there was none."""
    wishlist = lock_owned_resource(principal, ResourceRef.list(list_id))

    if wishlist.guest_access_token is None:
        return False

    wishlist.guest_access_token = None
    wishlist.guest_access_expires_at = None
    wishlist.save(update_fields=['guest_access_token', 'guest_access_expires_at', 'updated_at'])

    emit_change('list', 'guest_link_revoked', wishlist.id)
    logger.info("Guest link revoked for list %s", wishlist.id)
    return True
