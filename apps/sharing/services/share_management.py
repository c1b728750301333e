"""
Share management service.

Creates, updates and revokes direct shares of locations and lists, one
grantee at a time or in best-effort batches.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.core.events import emit_change
from apps.core.exceptions import (
    ErrorKind,
    ExpiredError,
    NotFoundError,
    NotOwnerError,
    SelfShareError,
)
from apps.core.results import service_result
from apps.core.types import Principal, ResourceRef, role_rank, validate_role
from apps.sharing.access import effective_role
from apps.sharing.models import Share

from .ownership import lock_owned_resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchShareOutcome:
    """Per-email result of share_with_many()."""

    email: str
    ok: bool
    share: Optional[Share] = None
    error: Optional[ErrorKind] = None
    message: str = ''


def later_expiry(first: Optional[datetime], second: Optional[datetime]) -> Optional[datetime]:
    """The later of two expiries, where None means never."""
    if first is None or second is None:
        return None
    return max(first, second)


def upsert_share(
    *,
    resource: ResourceRef,
    shared_by_id: UUID,
    grantee_id: UUID,
    role: str,
    expires_at: Optional[datetime] = None,
    keep_higher_role: bool = False,
) -> Share:
    """
    Create or replace the single share for (resource, grantee).

    Must run inside a transaction that already holds the resource lock.
    With ``keep_higher_role`` an existing stronger role is left alone and
    only its expiry may be extended.
    """
    lookup = dict(resource_type=resource.type, resource_id=resource.id, shared_with_id=grantee_id)

    share = Share.objects.select_for_update().filter(**lookup).first()
    created = False
    if share is None:
        try:
            with transaction.atomic():
                share = Share.objects.create(
                    shared_by_id=shared_by_id,
                    role=role,
                    expires_at=expires_at,
                    **lookup
                )
            created = True
        except IntegrityError:
            # Concurrent insert for the same grantee; fall through to update it
            share = Share.objects.select_for_update().get(**lookup)

    if not created:
        if keep_higher_role and share.is_active() and role_rank(share.role) >= role_rank(role):
            # Role stays, but the grant lasts as long as the longer of the two
            longer = later_expiry(share.expires_at, expires_at)
            if longer == share.expires_at:
                return share
            share.expires_at = longer
            share.save(update_fields=['expires_at', 'updated_at'])
        else:
            share.shared_by_id = shared_by_id
            share.role = role
            share.expires_at = expires_at
            share.save(update_fields=['shared_by', 'role', 'expires_at', 'updated_at'])

    emit_change(
        'share',
        'created' if created else 'updated',
        share.id,
        resource_type=share.resource_type,
        resource_id=share.resource_id,
        shared_with=share.shared_with_id,
        role=share.role,
        expires_at=share.expires_at,
    )
    logger.info(
        "Share %s %s: %s on %s for user %s",
        share.id, 'created' if created else 'updated', share.role, resource, grantee_id,
    )
    return share


@service_result
@transaction.atomic
def create_share(
    *,
    principal: Principal,
    resource: ResourceRef,
    grantee_id: UUID,
    role: str,
    expires_at: Optional[datetime] = None
) -> Share:
    """
    Share a location or list with another user (owner only).

    Re-sharing with the same grantee replaces the role and expiry; there
    is never more than one share row per (resource, grantee).

    Args:
        principal: Caller; must be the resource's current owner
        resource: Location or list to share
        grantee_id: UUID of the user receiving access
        role: 'viewer', 'editor' or 'admin'
        expires_at: Optional expiry; must be in the future

    Returns:
        ServiceResult wrapping the Share

    Errors:
        not_found: Resource invisible to the caller, or grantee doesn't exist
        not_owner: Caller can see the resource but doesn't own it
        self_share: Grantee is the owner
        expired: expires_at is not in the future
    """
    role = validate_role(role)
    target = lock_owned_resource(principal, resource)

    if str(grantee_id) == str(target.owner_id):
        raise SelfShareError()

    if not User.objects.filter(id=grantee_id, is_active=True).exists():
        raise NotFoundError("User not found", grantee_id=grantee_id)

    if expires_at is not None and expires_at <= timezone.now():
        raise ExpiredError("Share expiry must be in the future")

    return upsert_share(
        resource=resource,
        shared_by_id=target.owner_id,
        grantee_id=grantee_id,
        role=role,
        expires_at=expires_at,
    )


@service_result
@transaction.atomic
def revoke_share(*, principal: Principal, share_id: UUID) -> None:
    """
    Revoke a share (creator only).

    Errors:
        not_found: Share doesn't exist, or the caller can see neither the
            share nor its resource
        not_owner: Caller is the grantee, or can see the shared resource
            but didn't create the share
    """
    try:
        share = Share.objects.select_for_update().get(id=share_id)
    except Share.DoesNotExist:
        raise NotFoundError("Share not found")

    if principal.user_id is None or share.shared_by_id != principal.user_id:
        is_grantee = principal.user_id is not None and share.shared_with_id == principal.user_id
        resource = ResourceRef(share.resource_type, share.resource_id)
        if is_grantee or effective_role(principal, resource) is not None:
            raise NotOwnerError("Only the user who created this share can revoke it")
        raise NotFoundError("Share not found")

    revoked_id = share.id
    share.delete()

    emit_change(
        'share',
        'revoked',
        revoked_id,
        resource_type=share.resource_type,
        resource_id=share.resource_id,
        shared_with=share.shared_with_id,
    )
    logger.info("Share %s revoked by %s", revoked_id, principal.user_id)


@service_result
def share_with_many(
    *,
    principal: Principal,
    resource: ResourceRef,
    emails: Iterable[str],
    role: str,
    expires_at: Optional[datetime] = None
) -> List[BatchShareOutcome]:
    """
    Share a resource with several users by email, best effort.

    Ownership is checked once for the whole batch; after that every email
    is handled in its own transaction, so one bad address never undoes the
    others. Duplicate addresses (case-insensitive) are processed once.

    Returns:
        ServiceResult wrapping one BatchShareOutcome per distinct email
    """
    validate_role(role)

    with transaction.atomic():
        lock_owned_resource(principal, resource)

    outcomes = []
    seen = set()
    for raw_email in emails:
        email = (raw_email or '').strip()
        if not email or email.lower() in seen:
            continue
        seen.add(email.lower())

        user = User.objects.find_by_email(email)
        if user is None:
            outcomes.append(BatchShareOutcome(
                email=email,
                ok=False,
                error=ErrorKind.NOT_FOUND,
                message='User not found',
            ))
            continue

        result = create_share(
            principal=principal,
            resource=resource,
            grantee_id=user.id,
            role=role,
            expires_at=expires_at,
        )
        outcomes.append(BatchShareOutcome(
            email=email,
            ok=result.ok,
            share=result.value,
            error=result.error,
            message=result.message if not result.ok else 'Share created',
        ))

    logger.info(
        "Batch share on %s: %d of %d succeeded",
        resource, sum(1 for outcome in outcomes if outcome.ok), len(outcomes),
    )
    return outcomes
