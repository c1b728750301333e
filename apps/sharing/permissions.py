from rest_framework import exceptions, permissions

from apps.core.types import AccessRole, Principal, ResourceRef, role_rank
from .access import effective_role


class HasResourceRole(permissions.BasePermission):
    """
    Permission: caller must hold ``required_role`` on the resource in the URL.

    Subclass (or use resource_role()) to set the resource type, the URL
    kwarg carrying its id and the role needed. A caller with no role at
    all gets 404 instead of 403, so a probe can't tell hidden from missing.
    """

    resource_type = None
    url_kwarg = 'pk'
    required_role = AccessRole.VIEWER

    def has_permission(self, request, view):
        resource_id = view.kwargs.get(self.url_kwarg)
        if resource_id is None:
            return False

        role = effective_role(Principal.from_request(request), ResourceRef(self.resource_type, resource_id))
        if role is None:
            raise exceptions.NotFound('Not found')
        return role_rank(role) >= role_rank(self.required_role)


def resource_role(resource_type, url_kwarg, required_role=AccessRole.VIEWER):
    """Build a HasResourceRole subclass for one view."""
    return type(
        f'Has{resource_type.capitalize()}{required_role.capitalize()}Role',
        (HasResourceRole,),
        {
            'resource_type': resource_type,
            'url_kwarg': url_kwarg,
            'required_role': AccessRole(required_role),
            'message': f'Requires {required_role} access.',
        },
    )
