"""
Access resolver tests.

The first half runs the pure resolver on hand-built snapshots (no
database); the second half goes through the Django-backed store.
"""

import pytest
from datetime import datetime, timedelta, timezone as dt_timezone
from uuid import uuid4

from django.utils import timezone

from apps.core.exceptions import ForbiddenError, NotFoundError
from apps.core.types import AccessRole, Principal, ResourceRef, ShareableResource
from apps.sharing.access import Denied, check_access, effective_role, require_access, resolve_role
from apps.sharing.models import Share
from apps.sharing.store import AccessSnapshot, ResourceStore, ShareGrant
from apps.wishlists.models import Item, WishList


NOW = datetime(2026, 12, 1, 12, 0, tzinfo=dt_timezone.utc)
OWNER_ID = uuid4()
USER_ID = uuid4()
TOKEN = 'a' * 64


def make_snapshot(**overrides):
    values = dict(
        resource=ResourceRef.list(uuid4()),
        owner_ids=frozenset({OWNER_ID}),
        list_owner_id=OWNER_ID,
    )
    values.update(overrides)
    return AccessSnapshot(**values)


class FixedStore(ResourceStore):
    """Store returning one prepared snapshot."""

    def __init__(self, snapshot):
        self._snapshot = snapshot

    def snapshot(self, resource, principal):
        return self._snapshot


# =============================================================================
# Pure resolution
# =============================================================================

class TestResolveRole:

    def test_owner_is_always_admin(self):
        snapshot = make_snapshot(shares=(ShareGrant(role='viewer', expires_at=NOW - timedelta(days=1)),))

        assert resolve_role(snapshot, Principal(user_id=OWNER_ID), NOW) == AccessRole.ADMIN

    def test_any_owner_in_chain_is_admin(self):
        location_owner = uuid4()
        snapshot = make_snapshot(owner_ids=frozenset({OWNER_ID, location_owner}))

        assert resolve_role(snapshot, Principal(user_id=location_owner), NOW) == AccessRole.ADMIN

    def test_active_share_grants_its_role(self):
        snapshot = make_snapshot(shares=(ShareGrant(role='editor', expires_at=NOW + timedelta(hours=1)),))

        assert resolve_role(snapshot, Principal(user_id=USER_ID), NOW) == AccessRole.EDITOR

    @pytest.mark.parametrize('expires_at', [NOW, NOW - timedelta(seconds=1), NOW - timedelta(days=30)])
    def test_expired_share_is_ignored(self, expires_at):
        snapshot = make_snapshot(shares=(ShareGrant(role='admin', expires_at=expires_at),))

        assert resolve_role(snapshot, Principal(user_id=USER_ID), NOW) is None

    def test_grants_combine_by_maximum(self):
        snapshot = make_snapshot(
            shares=(
                ShareGrant(role='viewer', resource_type=ShareableResource.LIST),
                ShareGrant(role='admin', expires_at=NOW - timedelta(minutes=1)),
            ),
            membership_role='editor',
            is_public=True,
        )

        assert resolve_role(snapshot, Principal(user_id=USER_ID), NOW) == AccessRole.EDITOR

    def test_public_list_gives_viewer_to_anyone(self):
        snapshot = make_snapshot(is_public=True)

        assert resolve_role(snapshot, Principal.anonymous(), NOW) == AccessRole.VIEWER

    def test_matching_guest_token_gives_viewer(self):
        snapshot = make_snapshot(guest_access_token=TOKEN)

        assert resolve_role(snapshot, Principal.anonymous(TOKEN), NOW) == AccessRole.VIEWER

    def test_wrong_guest_token_gives_nothing(self):
        snapshot = make_snapshot(guest_access_token=TOKEN)

        assert resolve_role(snapshot, Principal.anonymous('b' * 64), NOW) is None
        assert resolve_role(snapshot, Principal.anonymous(''), NOW) is None

    def test_expired_guest_token_gives_nothing(self):
        snapshot = make_snapshot(guest_access_token=TOKEN, guest_access_expires_at=NOW)

        assert resolve_role(snapshot, Principal.anonymous(TOKEN), NOW) is None

    def test_list_without_token_never_matches(self):
        snapshot = make_snapshot(guest_access_token=None)

        assert resolve_role(snapshot, Principal.anonymous(TOKEN), NOW) is None

    def test_orphaned_resource_is_denied(self):
        snapshot = make_snapshot(owner_ids=frozenset(), is_public=True, membership_role='admin')

        assert resolve_role(snapshot, Principal(user_id=USER_ID), NOW) is None

    def test_missing_resource_is_denied(self):
        assert resolve_role(None, Principal(user_id=OWNER_ID), NOW) is None


class TestCheckAccessWithStore:

    def test_granted_carries_effective_role(self):
        store = FixedStore(make_snapshot(membership_role='editor'))

        decision = check_access(Principal(user_id=USER_ID), ResourceRef.list(uuid4()), 'viewer', store=store, now=NOW)

        assert decision.granted
        assert decision.role == AccessRole.EDITOR

    def test_insufficient_role_is_denied(self):
        store = FixedStore(make_snapshot(membership_role='viewer'))

        decision = check_access(Principal(user_id=USER_ID), ResourceRef.list(uuid4()), 'editor', store=store, now=NOW)

        assert decision == Denied
        assert not decision

    def test_invalid_required_role_raises(self):
        with pytest.raises(ValueError):
            check_access(Principal(user_id=USER_ID), ResourceRef.list(uuid4()), 'owner', store=FixedStore(None))


# =============================================================================
# Django-backed resolution
# =============================================================================

@pytest.mark.django_db
class TestDjangoStore:

    def test_owner_is_admin_on_everything(self, owner, location, wishlist, item):
        principal = Principal.for_user(owner)

        for resource in (ResourceRef.location(location.id), ResourceRef.list(wishlist.id), ResourceRef.item(item.id)):
            assert check_access(principal, resource, 'admin').role == AccessRole.ADMIN

    def test_location_owner_is_admin_of_lists_they_dont_own(self, owner, location, grantee):
        childs_list = WishList.objects.create(title="Bob's list", location=location, owner=grantee, year=2026)

        assert effective_role(Principal.for_user(owner), ResourceRef.list(childs_list.id)) == AccessRole.ADMIN

    def test_stranger_has_no_role(self, stranger, wishlist, item):
        principal = Principal.for_user(stranger)

        assert effective_role(principal, ResourceRef.list(wishlist.id)) is None
        assert effective_role(principal, ResourceRef.item(item.id)) is None

    def test_share_expiring_in_one_hour(self, owner, grantee, wishlist):
        """B gets viewer for an hour, then loses it without anyone touching the share."""
        Share.objects.create(
            resource_type=ShareableResource.LIST,
            resource_id=wishlist.id,
            shared_by=owner,
            shared_with=grantee,
            role=AccessRole.VIEWER,
            expires_at=timezone.now() + timedelta(hours=1),
        )
        principal = Principal.for_user(grantee)
        resource = ResourceRef.list(wishlist.id)

        assert check_access(principal, resource, 'viewer').granted
        assert check_access(principal, resource, 'viewer', now=timezone.now() + timedelta(hours=2)) == Denied

    def test_list_share_reaches_items(self, list_share, grantee, item):
        assert effective_role(Principal.for_user(grantee), ResourceRef.item(item.id)) == AccessRole.VIEWER

    def test_location_share_reaches_lists_and_items(self, owner, grantee, location, wishlist, item):
        Share.objects.create(
            resource_type=ShareableResource.LOCATION,
            resource_id=location.id,
            shared_by=owner,
            shared_with=grantee,
            role=AccessRole.EDITOR,
        )
        principal = Principal.for_user(grantee)

        assert effective_role(principal, ResourceRef.list(wishlist.id)) == AccessRole.EDITOR
        assert effective_role(principal, ResourceRef.item(item.id)) == AccessRole.EDITOR

    def test_membership_and_share_combine(self, location_member, list_share, grantee, wishlist):
        # editor membership beats the viewer list share
        assert effective_role(Principal.for_user(grantee), ResourceRef.list(wishlist.id)) == AccessRole.EDITOR

    def test_public_list_is_visible_to_anonymous(self, wishlist, item):
        wishlist.is_public = True
        wishlist.save()

        assert effective_role(Principal.anonymous(), ResourceRef.item(item.id)) == AccessRole.VIEWER
        assert effective_role(Principal.anonymous(), ResourceRef.location(wishlist.location_id)) is None

    def test_guest_token_on_list(self, wishlist, item):
        WishList.objects.filter(id=wishlist.id).update(guest_access_token=TOKEN)

        assert effective_role(Principal.anonymous(TOKEN), ResourceRef.item(item.id)) == AccessRole.VIEWER
        assert effective_role(Principal.anonymous('c' * 64), ResourceRef.item(item.id)) is None

    def test_deleted_item_is_denied(self, owner, item):
        item_id = item.id
        Item.objects.filter(id=item_id).delete()

        assert check_access(Principal.for_user(owner), ResourceRef.item(item_id), 'viewer') == Denied

    def test_require_access_hides_invisible_resources(self, stranger, wishlist):
        with pytest.raises(NotFoundError):
            require_access(Principal.for_user(stranger), ResourceRef.list(wishlist.id), 'viewer')

    def test_require_access_forbids_low_role(self, list_share, grantee, wishlist):
        with pytest.raises(ForbiddenError) as exc_info:
            require_access(Principal.for_user(grantee), ResourceRef.list(wishlist.id), 'editor')

        assert exc_info.value.context == {'role': AccessRole.VIEWER}
