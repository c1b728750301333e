"""
Shared value types for access control.

Roles, resource references and the request principal are plain values
threaded explicitly through every service call. Nothing here touches the
database.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import models


class AccessRole(models.TextChoices):
    VIEWER = 'viewer', 'Viewer'
    EDITOR = 'editor', 'Editor'
    ADMIN = 'admin', 'Admin'


ROLE_RANK = {
    AccessRole.VIEWER: 1,
    AccessRole.EDITOR: 2,
    AccessRole.ADMIN: 3,
}


def role_rank(role) -> int:
    """Return the rank of a role, 0 for None or unknown values."""
    if role is None:
        return 0
    return ROLE_RANK.get(role, 0)


def max_role(roles):
    """Highest role in an iterable, or None when empty."""
    best = None
    for role in roles:
        if role_rank(role) > role_rank(best):
            best = AccessRole(role)
    return best


def validate_role(role: str) -> AccessRole:
    if role not in AccessRole.values:
        raise ValueError(f"Invalid role. Must be one of: {AccessRole.values}")
    return AccessRole(role)


class ResourceType(models.TextChoices):
    LOCATION = 'location', 'Location'
    LIST = 'list', 'List'
    ITEM = 'item', 'Item'


class ShareableResource(models.TextChoices):
    """Resource types that can carry shares and invite codes."""
    LOCATION = 'location', 'Location'
    LIST = 'list', 'List'


@dataclass(frozen=True)
class ResourceRef:
    type: ResourceType
    id: UUID

    def __post_init__(self):
        object.__setattr__(self, 'type', ResourceType(self.type))
        if not isinstance(self.id, UUID):
            object.__setattr__(self, 'id', UUID(str(self.id)))

    @classmethod
    def location(cls, location_id) -> 'ResourceRef':
        return cls(ResourceType.LOCATION, location_id)

    @classmethod
    def list(cls, list_id) -> 'ResourceRef':
        return cls(ResourceType.LIST, list_id)

    @classmethod
    def item(cls, item_id) -> 'ResourceRef':
        return cls(ResourceType.ITEM, item_id)

    @property
    def is_shareable(self) -> bool:
        return self.type in ShareableResource.values

    def __str__(self):
        return f"{self.type}:{self.id}"


@dataclass(frozen=True)
class Principal:
    """
    The caller of an operation.

    Either an authenticated user, an anonymous holder of a guest token,
    or both (a signed-in user following a share link).
    """

    user_id: Optional[UUID] = None
    guest_token: Optional[str] = None

    def __post_init__(self):
        if self.user_id is not None and not isinstance(self.user_id, UUID):
            object.__setattr__(self, 'user_id', UUID(str(self.user_id)))

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def for_user(cls, user, guest_token: Optional[str] = None) -> 'Principal':
        return cls(user_id=user.id, guest_token=guest_token)

    @classmethod
    def anonymous(cls, guest_token: Optional[str] = None) -> 'Principal':
        return cls(user_id=None, guest_token=guest_token)

    @classmethod
    def from_request(cls, request) -> 'Principal':
        """Build a principal from a DRF request and its optional guest token."""
        guest_token = (
            request.headers.get('X-Guest-Token')
            or request.query_params.get('guest_token')
            or None
        )
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            return cls.for_user(user, guest_token=guest_token)
        return cls.anonymous(guest_token=guest_token)

    def __repr__(self):
        # The guest token is a secret; keep it out of logs and tracebacks.
        token = '<set>' if self.guest_token else None
        return f"Principal(user_id={self.user_id!r}, guest_token={token})"
