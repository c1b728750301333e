import pytest
from uuid import UUID, uuid4
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory

from apps.core.types import (
    AccessRole,
    Principal,
    ResourceRef,
    ResourceType,
    max_role,
    role_rank,
    validate_role,
)


class TestRoles:

    def test_roles_are_ordered(self):
        assert role_rank(AccessRole.VIEWER) < role_rank(AccessRole.EDITOR) < role_rank(AccessRole.ADMIN)
        assert role_rank(None) == 0

    def test_max_role_combines_by_rank(self):
        assert max_role(['viewer', 'admin', 'editor']) == AccessRole.ADMIN
        assert max_role(['editor', 'viewer']) == AccessRole.EDITOR
        assert max_role([]) is None

    def test_validate_role_rejects_unknown(self):
        assert validate_role('editor') == AccessRole.EDITOR
        with pytest.raises(ValueError, match='Invalid role'):
            validate_role('owner')


class TestResourceRef:

    def test_coerces_type_and_id(self):
        resource_id = uuid4()
        ref = ResourceRef('list', str(resource_id))

        assert ref.type == ResourceType.LIST
        assert ref.id == resource_id
        assert isinstance(ref.id, UUID)

    def test_only_locations_and_lists_are_shareable(self):
        assert ResourceRef.location(uuid4()).is_shareable
        assert ResourceRef.list(uuid4()).is_shareable
        assert not ResourceRef.item(uuid4()).is_shareable

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            ResourceRef('group', uuid4())


class TestPrincipal:

    def test_guest_token_from_header(self):
        request = Request(APIRequestFactory().get('/', HTTP_X_GUEST_TOKEN='abc'))

        principal = Principal.from_request(request)

        assert principal.user_id is None
        assert principal.guest_token == 'abc'
        assert not principal.is_authenticated

    def test_guest_token_from_query_param(self):
        request = Request(APIRequestFactory().get('/', {'guest_token': 'xyz'}))

        assert Principal.from_request(request).guest_token == 'xyz'

    def test_repr_hides_guest_token(self):
        principal = Principal.anonymous(guest_token='super-secret-token')

        assert 'super-secret-token' not in repr(principal)
        assert 'super-secret-token' not in str(principal)
