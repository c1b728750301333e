"""
Ownership checks shared by every granting operation.

Ownership is re-read under a row lock on each call, never cached, so a
grant can only be issued by whoever owns the resource at commit time.
"""

from apps.core.exceptions import NotFoundError, NotOwnerError
from apps.core.types import Principal, ResourceRef, ResourceType
from apps.sharing.access import effective_role
from apps.wishlists.models import Location, WishList


RESOURCE_MODELS = {
    ResourceType.LOCATION: Location,
    ResourceType.LIST: WishList,
}


def lock_resource(resource: ResourceRef):
    """
    Fetch a shareable resource with a row lock.

    Raises:
        ValueError: If the resource type cannot carry grants
        NotFoundError: If the resource doesn't exist
    """
    model = RESOURCE_MODELS.get(resource.type)
    if model is None:
        raise ValueError(f"Resources of type '{resource.type}' cannot be shared")

    try:
        return model.objects.select_for_update().get(id=resource.id)
    except model.DoesNotExist:
        raise NotFoundError(f"{resource.type.label} not found")


def lock_owned_resource(principal: Principal, resource: ResourceRef):
    """
    Fetch a shareable resource with a row lock and require its current owner.

    Non-owners who cannot see the resource get NotFound rather than
    NotOwner, so probing IDs reveals nothing.

    Raises:
        NotFoundError: If the resource doesn't exist or is invisible to the caller
        NotOwnerError: If the caller can see the resource but doesn't own it
    """
    obj = lock_resource(resource)

    if principal.user_id is None or obj.owner_id != principal.user_id:
        if effective_role(principal, resource) is None:
            raise NotFoundError(f"{resource.type.label} not found")
        raise NotOwnerError(f"Only the {resource.type.label.lower()} owner can share it")

    return obj
