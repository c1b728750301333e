import pytest
from decimal import Decimal

from django.utils import timezone

from apps.core.exceptions import ErrorKind
from apps.core.types import AccessRole, Principal, ShareableResource
from apps.sharing.models import Share
from apps.wishlists.models import Item, WishList
from apps.wishlists.services import (
    get_accessible_lists,
    get_list_items,
    get_list_summary,
    get_location_summary,
)


@pytest.mark.django_db
class TestAccessibleLists:

    def test_owner_sees_own_list_as_admin(self, wishlist, owner):
        lists = get_accessible_lists(principal=Principal.for_user(owner))

        assert [wishlist.id] == [l.id for l in lists]
        assert lists[0].access_level == AccessRole.ADMIN

    def test_member_sees_location_lists(self, wishlist, member):
        lists = get_accessible_lists(principal=Principal.for_user(member))

        assert [l.id for l in lists] == [wishlist.id]
        assert lists[0].access_level == AccessRole.VIEWER

    def test_list_share_grants_role(self, wishlist, owner, stranger):
        Share.objects.create(
            resource_type=ShareableResource.LIST,
            resource_id=wishlist.id,
            shared_by=owner,
            shared_with=stranger,
            role=AccessRole.EDITOR,
        )

        lists = get_accessible_lists(principal=Principal.for_user(stranger))

        assert lists[0].access_level == AccessRole.EDITOR

    def test_stranger_sees_nothing(self, wishlist, stranger):
        assert get_accessible_lists(principal=Principal.for_user(stranger)) == []

    def test_public_list_visible_to_anonymous(self, wishlist):
        WishList.objects.filter(id=wishlist.id).update(is_public=True)

        lists = get_accessible_lists(principal=Principal.anonymous())

        assert [l.id for l in lists] == [wishlist.id]
        assert lists[0].access_level == AccessRole.VIEWER

    def test_guest_token(self, wishlist):
        WishList.objects.filter(id=wishlist.id).update(guest_access_token='a' * 64)

        assert get_accessible_lists(principal=Principal.anonymous('a' * 64))[0].id == wishlist.id
        assert get_accessible_lists(principal=Principal.anonymous('b' * 64)) == []

    def test_year_filter(self, wishlist, location, owner):
        older = WishList.objects.create(title='Last year', location=location, owner=owner, year=2025)

        lists = get_accessible_lists(principal=Principal.for_user(owner), year=2025)

        assert [l.id for l in lists] == [older.id]


@pytest.mark.django_db
class TestListSummary:

    @pytest.fixture
    def items(self, item, purchased_item, wishlist, owner):
        Item.objects.create(list=wishlist, title='Socks', price=Decimal('5.00'), quantity=3, created_by=owner)
        Item.objects.create(list=wishlist, title='Surprise', price=None, created_by=owner)

    def test_shopper_sees_purchase_figures(self, items, wishlist, member):
        result = get_list_summary(principal=Principal.for_user(member), list_id=wishlist.id)

        assert result.ok
        assert result.value == {
            'total_items': 4,
            'total_value': Decimal('164.99'),
            'purchased_items': 1,
            'purchased_value': Decimal('120.00'),
            'completion_percentage': Decimal('25.00'),
        }

    def test_owner_gets_totals_only(self, items, wishlist, owner):
        summary = get_list_summary(principal=Principal.for_user(owner), list_id=wishlist.id).value

        assert summary == {'total_items': 4, 'total_value': Decimal('164.99')}

    def test_empty_list(self, wishlist, member):
        summary = get_list_summary(principal=Principal.for_user(member), list_id=wishlist.id).value

        assert summary['total_items'] == 0
        assert summary['completion_percentage'] == Decimal('0.00')

    def test_invisible_list(self, wishlist, stranger):
        result = get_list_summary(principal=Principal.for_user(stranger), list_id=wishlist.id)

        assert result.error == ErrorKind.NOT_FOUND


@pytest.mark.django_db
class TestListItems:

    def test_viewer_gets_items(self, item, purchased_item, wishlist, member):
        result = get_list_items(principal=Principal.for_user(member), list_id=wishlist.id)

        assert {i.id for i in result.value} == {item.id, purchased_item.id}

    def test_invisible_list(self, wishlist, stranger):
        result = get_list_items(principal=Principal.for_user(stranger), list_id=wishlist.id)

        assert result.error == ErrorKind.NOT_FOUND


@pytest.mark.django_db
class TestLocationSummary:

    @pytest.fixture
    def shopper_list(self, location, member, owner):
        """A second list in the location, owned by the member, with one bought item."""
        wishlist = WishList.objects.create(title="Shopper's Wishes", location=location, owner=member)
        Item.objects.create(
            list=wishlist,
            title='Book',
            created_by=member,
            is_purchased=True,
            purchased_by=owner,
            purchased_at=timezone.now(),
        )
        return wishlist

    def test_counts(self, item, purchased_item, shopper_list, location, owner):
        result = get_location_summary(principal=Principal.for_user(owner), location_id=location.id)

        assert result.ok
        assert result.value['total_lists'] == 2
        assert result.value['total_items'] == 3
        assert result.value['total_members'] == 1

    def test_own_lists_purchases_not_counted(self, item, purchased_item, shopper_list, location, owner, member):
        for_owner = get_location_summary(principal=Principal.for_user(owner), location_id=location.id).value
        for_member = get_location_summary(principal=Principal.for_user(member), location_id=location.id).value

        # owner only sees the purchase on the member's list and vice versa
        assert for_owner['purchased_items'] == 1
        assert for_member['purchased_items'] == 1

    def test_invisible_location(self, location, stranger):
        result = get_location_summary(principal=Principal.for_user(stranger), location_id=location.id)

        assert result.error == ErrorKind.NOT_FOUND
