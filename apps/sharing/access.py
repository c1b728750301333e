"""
Access resolution for locations, lists and items.

This module answers one question: what role does a principal hold on a
resource right now?

Invariants:
    - Owners always hold admin. For a list that is the list owner or the
      owner of its location; an item inherits from its list.
    - Grants combine by maximum (viewer < editor < admin), never by first
      match.
    - Expired shares and expired guest tokens are ignored, not errors.
    - A resource without a resolvable owner is denied to everyone.
    - Guest tokens are compared in constant time.
    - Nothing is cached between calls.
"""

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.utils import timezone

from apps.core.exceptions import ForbiddenError, NotFoundError
from apps.core.types import AccessRole, Principal, ResourceRef, max_role, role_rank, validate_role

from .store import AccessSnapshot, ResourceStore, default_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessDecision:
    granted: bool
    role: Optional[AccessRole] = None

    def __bool__(self):
        return self.granted


def Granted(role) -> AccessDecision:
    return AccessDecision(granted=True, role=AccessRole(role))


Denied = AccessDecision(granted=False)


def guest_token_matches(snapshot: AccessSnapshot, token: Optional[str], now: datetime) -> bool:
    if not token or not snapshot.guest_access_token:
        return False
    if snapshot.guest_access_expires_at is not None and snapshot.guest_access_expires_at <= now:
        return False
    return hmac.compare_digest(snapshot.guest_access_token.encode(), token.encode())


def resolve_role(snapshot: Optional[AccessSnapshot], principal: Principal, now: datetime):
    """
    Compute the effective role of ``principal`` from a store snapshot.

    Pure: depends only on its arguments. Returns None when no grant applies.
    """
    if snapshot is None or not snapshot.owner_ids:
        return None

    if principal.user_id is not None and principal.user_id in snapshot.owner_ids:
        return AccessRole.ADMIN

    roles = [share.role for share in snapshot.shares if share.is_active(now)]

    if snapshot.membership_role:
        roles.append(snapshot.membership_role)

    if snapshot.is_public:
        roles.append(AccessRole.VIEWER)

    if guest_token_matches(snapshot, principal.guest_token, now):
        roles.append(AccessRole.VIEWER)

    return max_role(roles)


def effective_role(principal: Principal, resource: ResourceRef, *,
                   store: Optional[ResourceStore] = None, now: Optional[datetime] = None):
    store = store or default_store
    now = now or timezone.now()
    return resolve_role(store.snapshot(resource, principal), principal, now)


def check_access(principal: Principal, resource: ResourceRef, required_role, *,
                 store: Optional[ResourceStore] = None, now: Optional[datetime] = None) -> AccessDecision:
    """
    Single authorization entry point.

    Returns Granted(role) when the effective role reaches ``required_role``,
    otherwise Denied.
    """
    required = validate_role(required_role)
    role = effective_role(principal, resource, store=store, now=now)

    if role is not None and role_rank(role) >= role_rank(required):
        return Granted(role)
    return Denied


def require_access(principal: Principal, resource: ResourceRef, required_role, *,
                   store: Optional[ResourceStore] = None, now: Optional[datetime] = None) -> AccessRole:
    """
    Service-layer guard built on check_access.

    Raises:
        NotFoundError: If the principal holds no role at all (hides existence)
        ForbiddenError: If the principal can see the resource but the role is too low
    """
    required = validate_role(required_role)
    role = effective_role(principal, resource, store=store, now=now)

    if role is None:
        raise NotFoundError(f"{resource.type.label} not found")
    if role_rank(role) < role_rank(required):
        logger.warning("Denied %s on %s: has %s, needs %s", principal, resource, role, required)
        raise ForbiddenError(f"Requires {required.label.lower()} access", role=role)
    return role
