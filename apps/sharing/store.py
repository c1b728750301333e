"""
Read side of the resource store used by access resolution.

The resolver never queries the ORM itself: it asks a ResourceStore for an
AccessSnapshot of one resource as seen by one principal, then decides on
that snapshot alone. Tests can hand the resolver snapshots directly, and a
non-Django store only has to implement ``snapshot()``.

Invariants:
    - Snapshots are built fresh on every call; nothing is cached, so a
      revoked share stops granting access on the very next check.
    - A missing resource (or a broken parent chain) yields None.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional, Tuple
from uuid import UUID

from django.db.models import Q

from apps.core.types import Principal, ResourceRef, ResourceType, ShareableResource


@dataclass(frozen=True)
class ShareGrant:
    """A share held by the principal on the resource or one of its ancestors."""

    role: str
    expires_at: Optional[datetime] = None
    resource_type: str = ShareableResource.LIST

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now


@dataclass(frozen=True)
class AccessSnapshot:
    resource: ResourceRef
    owner_ids: FrozenSet[UUID] = frozenset()
    list_owner_id: Optional[UUID] = None
    shares: Tuple[ShareGrant, ...] = ()
    membership_role: Optional[str] = None
    is_public: bool = False
    guest_access_token: Optional[str] = field(default=None, repr=False)
    guest_access_expires_at: Optional[datetime] = None


class ResourceStore(ABC):
    """Source of access snapshots."""

    @abstractmethod
    def snapshot(self, resource: ResourceRef, principal: Principal) -> Optional[AccessSnapshot]:
        """Return the access facts for ``resource`` relevant to ``principal``."""


class DjangoResourceStore(ResourceStore):
    """ResourceStore backed by the Django ORM models."""

    def snapshot(self, resource, principal):
        if resource.type == ResourceType.LOCATION:
            return self._location_snapshot(resource, principal)
        if resource.type == ResourceType.LIST:
            return self._list_snapshot(resource, principal)
        if resource.type == ResourceType.ITEM:
            return self._item_snapshot(resource, principal)
        raise ValueError(f"Unknown resource type: {resource.type}")

    def _location_snapshot(self, resource, principal):
        from apps.wishlists.models import Location

        location = Location.objects.filter(id=resource.id).values('id', 'owner_id').first()
        if location is None:
            return None

        return AccessSnapshot(
            resource=resource,
            owner_ids=_owners(location['owner_id']),
            shares=self._shares(principal, location_id=location['id']),
            membership_role=self._membership_role(principal, location['id']),
        )

    def _list_snapshot(self, resource, principal, *, for_resource=None):
        from apps.wishlists.models import WishList

        wishlist = (
            WishList.objects
            .filter(id=resource.id)
            .values(
                'id',
                'owner_id',
                'location_id',
                'location__owner_id',
                'is_public',
                'guest_access_token',
                'guest_access_expires_at',
            )
            .first()
        )
        if wishlist is None:
            return None

        return AccessSnapshot(
            resource=for_resource or resource,
            owner_ids=_owners(wishlist['owner_id'], wishlist['location__owner_id']),
            list_owner_id=wishlist['owner_id'],
            shares=self._shares(
                principal,
                location_id=wishlist['location_id'],
                list_id=wishlist['id'],
            ),
            membership_role=self._membership_role(principal, wishlist['location_id']),
            is_public=wishlist['is_public'],
            guest_access_token=wishlist['guest_access_token'],
            guest_access_expires_at=wishlist['guest_access_expires_at'],
        )

    def _item_snapshot(self, resource, principal):
        from apps.wishlists.models import Item

        list_id = Item.objects.filter(id=resource.id).values_list('list_id', flat=True).first()
        if list_id is None:
            return None
        return self._list_snapshot(ResourceRef.list(list_id), principal, for_resource=resource)

    def _shares(self, principal, *, location_id, list_id=None):
        """All of the principal's shares on the location and, if given, the list."""
        from apps.sharing.models import Share

        if not principal.is_authenticated:
            return ()

        target = Q(resource_type=ShareableResource.LOCATION, resource_id=location_id)
        if list_id is not None:
            target |= Q(resource_type=ShareableResource.LIST, resource_id=list_id)

        rows = (
            Share.objects
            .filter(target, shared_with_id=principal.user_id)
            .values_list('role', 'expires_at', 'resource_type')
        )
        return tuple(
            ShareGrant(role=role, expires_at=expires_at, resource_type=resource_type)
            for role, expires_at, resource_type in rows
        )

    def _membership_role(self, principal, location_id):
        from apps.sharing.models import LocationMember

        if not principal.is_authenticated:
            return None
        return (
            LocationMember.objects
            .filter(location_id=location_id, user_id=principal.user_id)
            .values_list('role', flat=True)
            .first()
        )


def _owners(*owner_ids):
    return frozenset(owner_id for owner_id in owner_ids if owner_id is not None)


default_store = DjangoResourceStore()
