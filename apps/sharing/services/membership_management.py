"""
Location membership service.

Memberships are standing grants on a whole location. Only the location
owner adds members; the owner or the member themselves can remove one.
"""

import logging
from uuid import UUID

from django.db import IntegrityError, transaction

from apps.accounts.models import User
from apps.core.events import emit_change
from apps.core.exceptions import NotFoundError, NotOwnerError, SelfShareError
from apps.core.results import service_result
from apps.core.types import Principal, ResourceRef, role_rank, validate_role
from apps.sharing.access import effective_role
from apps.sharing.models import LocationMember

from .ownership import lock_owned_resource, lock_resource

logger = logging.getLogger(__name__)


def upsert_membership(*, location, user_id, role, added_by_id, keep_higher_role=False) -> LocationMember:
    """
    Create or update a membership. Caller must hold the location lock.
    """
    member = (
        LocationMember.objects
        .select_for_update()
        .filter(location=location, user_id=user_id)
        .first()
    )

    if member is None:
        try:
            with transaction.atomic():
                member = LocationMember.objects.create(
                    location=location,
                    user_id=user_id,
                    role=role,
                    added_by_id=added_by_id,
                )
        except IntegrityError:
            member = LocationMember.objects.select_for_update().get(location=location, user_id=user_id)
        else:
            emit_change('location_member', 'added', member.id,
                        location_id=location.id, user_id=user_id, role=role)
            logger.info("User %s joined location %s as %s", user_id, location.id, role)
            return member

    if keep_higher_role and role_rank(member.role) >= role_rank(role):
        return member

    if member.role != role:
        member.role = role
        member.save(update_fields=['role'])
        emit_change('location_member', 'updated', member.id,
                    location_id=location.id, user_id=user_id, role=role)
    return member


@service_result
@transaction.atomic
def add_location_member(
    *,
    principal: Principal,
    location_id: UUID,
    user_id: UUID,
    role: str
) -> LocationMember:
    """
    Add a user to a location, or change their role (owner only).

    Errors:
        not_found: Location invisible to the caller, or user doesn't exist
        not_owner: Caller can see the location but doesn't own it
        self_share: The owner tried to add themselves
    """
    role = validate_role(role)
    location = lock_owned_resource(principal, ResourceRef.location(location_id))

    if str(user_id) == str(location.owner_id):
        raise SelfShareError("The owner already has full access to this location")

    if not User.objects.filter(id=user_id, is_active=True).exists():
        raise NotFoundError("User not found", user_id=user_id)

    return upsert_membership(
        location=location,
        user_id=user_id,
        role=role,
        added_by_id=principal.user_id,
    )


@service_result
@transaction.atomic
def remove_location_member(*, principal: Principal, location_id: UUID, user_id: UUID) -> None:
    """
    Remove a member from a location.

    The owner can remove anyone; a member can remove themselves (leave).
    """
    resource = ResourceRef.location(location_id)
    location = lock_resource(resource)

    is_owner = principal.user_id is not None and principal.user_id == location.owner_id
    is_self = principal.user_id is not None and str(principal.user_id) == str(user_id)

    if not (is_owner or is_self):
        if effective_role(principal, resource) is None:
            raise NotFoundError("Location not found")
        raise NotOwnerError("Only the location owner can remove members")

    membership = (
        LocationMember.objects
        .select_for_update()
        .filter(location=location, user_id=user_id)
        .first()
    )
    if membership is None:
        raise NotFoundError("Member not found")

    membership_id = membership.id
    membership.delete()

    emit_change('location_member', 'removed', membership_id,
                location_id=location.id, user_id=user_id)
    logger.info("User %s removed from location %s by %s", user_id, location.id, principal.user_id)
