"""
Invite code service.

Invite codes are short codes a person can read aloud or type on a phone.
Redeeming one grants its role on a location (as a membership) or on a list
(as a share), up to ``max_uses`` times.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.events import emit_change
from apps.core.exceptions import (
    ExhaustedError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    SelfShareError,
)
from apps.core.results import service_result
from apps.core.types import AccessRole, Principal, ResourceRef, ResourceType, validate_role
from apps.sharing.models import InviteCode, LocationMember, Share

from .membership_management import upsert_membership
from .ownership import lock_owned_resource, lock_resource
from .share_management import upsert_share

logger = logging.getLogger(__name__)

# No 0/O or 1/I/L
INVITE_CODE_ALPHABET = 'ABCDEFGHJKMNPQRSTUVWXYZ23456789'


@dataclass(frozen=True)
class InviteRedemption:
    invite: InviteCode
    resource: ResourceRef
    role: AccessRole
    grant: Union[Share, LocationMember]


def generate_invite_code(length: Optional[int] = None) -> str:
    length = length or settings.INVITE_CODE_LENGTH
    return ''.join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(code: str) -> str:
    return (code or '').strip().upper()


@service_result
@transaction.atomic
def create_invite_code(
    *,
    principal: Principal,
    resource: ResourceRef,
    default_role: str = AccessRole.VIEWER,
    max_uses: int = 1,
    expires_at: Optional[datetime] = None,
    max_retries: Optional[int] = None
) -> InviteCode:
    """
    Create an invite code for a location or list (owner only).

    Uses retry logic to ensure the short code is unique.

    Raises:
        ValueError: If the role is invalid or max_uses < 1
        RuntimeError: If cannot generate unique code after retries
    """
    role = validate_role(default_role)
    if max_uses < 1:
        raise ValueError("max_uses must be at least 1")

    target = lock_owned_resource(principal, resource)

    if expires_at is not None and expires_at <= timezone.now():
        raise ExpiredError("Invite code expiry must be in the future")

    max_retries = max_retries or settings.INVITE_CODE_MAX_RETRIES
    for attempt in range(max_retries):
        code = generate_invite_code()
        try:
            with transaction.atomic():
                invite = InviteCode.objects.create(
                    code=code,
                    resource_type=resource.type,
                    resource_id=resource.id,
                    created_by_id=target.owner_id,
                    default_role=role,
                    max_uses=max_uses,
                    expires_at=expires_at,
                )
        except IntegrityError:
            # Collision detected, retry
            if attempt == max_retries - 1:
                raise RuntimeError(
                    f"Failed to generate unique invite code after {max_retries} attempts"
                )
            continue

        emit_change(
            'invite',
            'created',
            invite.id,
            resource_type=invite.resource_type,
            resource_id=invite.resource_id,
            default_role=invite.default_role,
            max_uses=invite.max_uses,
            expires_at=invite.expires_at,
        )
        logger.info("Invite code created for %s (%d uses)", resource, max_uses)
        return invite

    # Should never reach here
    raise RuntimeError("Unexpected error in invite code generation")


@service_result
@transaction.atomic
def redeem_invite_code(*, principal: Principal, code: str) -> InviteRedemption:
    """
    Redeem an invite code for the calling user.

    The code row is locked for the whole redemption, so concurrent
    redeemers of the last use cannot both succeed. A role the user already
    holds above the code's role is kept.

    Errors:
        forbidden: Caller is not signed in
        not_found: Unknown code, or its resource or owner changed
        expired: Code is past its expiry
        exhausted: Code has no uses left
        self_share: The owner redeemed their own code
    """
    if not principal.is_authenticated:
        raise ForbiddenError("Sign in to redeem an invite code")

    try:
        invite = InviteCode.objects.select_for_update().get(code=normalize_invite_code(code))
    except InviteCode.DoesNotExist:
        raise NotFoundError("Invite code not found")

    if invite.is_expired():
        raise ExpiredError("This invite code has expired")

    if invite.use_count >= invite.max_uses:
        raise ExhaustedError()

    resource = ResourceRef(invite.resource_type, invite.resource_id)
    target = lock_resource(resource)

    # Codes die with their creator's ownership
    if target.owner_id != invite.created_by_id:
        raise NotFoundError("Invite code not found")

    if principal.user_id == target.owner_id:
        raise SelfShareError("You already own this resource")

    invite.use_count += 1
    invite.save(update_fields=['use_count'])

    if resource.type == ResourceType.LOCATION:
        grant = upsert_membership(
            location=target,
            user_id=principal.user_id,
            role=invite.default_role,
            added_by_id=invite.created_by_id,
            keep_higher_role=True,
        )
    else:
        grant = upsert_share(
            resource=resource,
            shared_by_id=invite.created_by_id,
            grantee_id=principal.user_id,
            role=invite.default_role,
            keep_higher_role=True,
        )

    emit_change(
        'invite',
        'redeemed',
        invite.id,
        redeemed_by=principal.user_id,
        use_count=invite.use_count,
    )
    logger.info(
        "Invite %s redeemed by %s (%d/%d)",
        invite.id, principal.user_id, invite.use_count, invite.max_uses,
    )
    return InviteRedemption(invite=invite, resource=resource, role=AccessRole(grant.role), grant=grant)
