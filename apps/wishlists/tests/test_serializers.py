"""
Gift secrecy in item projections.

The list owner must never learn from an item payload whether it has been
reserved or bought, or by whom.
"""

import pytest
from datetime import timedelta

from django.utils import timezone

from apps.core.types import Principal
from apps.purchases.models import PurchaseReservation
from apps.purchases.services import confirm_purchase, reserve, unmark_purchase
from apps.wishlists.serializers import GIFT_SECRET_FIELDS, ItemSerializer, project_item


@pytest.mark.django_db
class TestItemProjection:

    def test_owner_never_sees_purchase_state(self, purchased_item, owner):
        data = project_item(purchased_item, Principal.for_user(owner))

        for field in GIFT_SECRET_FIELDS:
            assert field not in data
        assert data['title'] == 'Espresso machine'

    def test_shopper_sees_purchase_state(self, purchased_item, member):
        data = project_item(purchased_item, Principal.for_user(member))

        assert data['is_purchased'] is True
        assert data['purchased_by']['id'] == str(member.id)
        assert data['purchased_at'] is not None

    def test_missing_principal_hides_purchase_state(self, purchased_item):
        data = ItemSerializer(purchased_item).data

        for field in GIFT_SECRET_FIELDS:
            assert field not in data

    def test_guest_sees_purchase_state(self, purchased_item):
        data = project_item(purchased_item, Principal.anonymous('e' * 64))

        assert data['is_purchased'] is True

    def test_live_reservation_is_shown_to_shoppers(self, item, member, other_shopper):
        PurchaseReservation.objects.create(
            item=item,
            user=member,
            expires_at=timezone.now() + timedelta(minutes=10),
        )
        item.refresh_from_db()

        mine = project_item(item, Principal.for_user(member))['reservation']
        theirs = project_item(item, Principal.for_user(other_shopper))['reservation']

        assert mine['reserved_by'] == member.id
        assert mine['is_mine'] is True
        assert theirs['is_mine'] is False

    def test_expired_reservation_is_not_shown(self, item, member):
        PurchaseReservation.objects.create(
            item=item,
            user=member,
            reserved_at=timezone.now() - timedelta(hours=1),
            expires_at=timezone.now() - timedelta(minutes=1),
        )
        item.refresh_from_db()

        assert project_item(item, Principal.for_user(member))['reservation'] is None

    def test_owner_does_not_see_reservation(self, item, owner, member):
        PurchaseReservation.objects.create(
            item=item,
            user=member,
            expires_at=timezone.now() + timedelta(minutes=10),
        )
        item.refresh_from_db()

        assert 'reservation' not in project_item(item, Principal.for_user(owner))

    def test_owner_view_unchanged_by_purchase_and_unmark(self, item, owner, member):
        shopper = Principal.for_user(member)
        before = project_item(item, Principal.for_user(owner))

        reserve(principal=shopper, item_id=item.id)
        confirm_purchase(principal=shopper, item_id=item.id)
        item.refresh_from_db()
        after_purchase = project_item(item, Principal.for_user(owner))

        unmark_purchase(principal=shopper, item_id=item.id)
        item.refresh_from_db()
        after_unmark = project_item(item, Principal.for_user(owner))

        assert before == after_purchase == after_unmark
