"""
Races between shoppers on the same item.

These run against a real transaction per thread, so the row locks and the
one-reservation-per-item index are what keep the outcome consistent.
"""

import threading

import pytest
from django.db import connection

from apps.core.exceptions import ErrorKind
from apps.core.types import AccessRole, Principal
from apps.purchases.models import PurchaseReservation
from apps.purchases.services import confirm_purchase, reserve
from apps.sharing.models import LocationMember
from apps.wishlists.models import Item


def run_concurrently(target, args_list):
    threads = [threading.Thread(target=target, args=args) for args in args_list]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


@pytest.mark.django_db(transaction=True)
class TestConcurrentReservations:

    @pytest.fixture
    def shoppers(self, user_factory, location, owner):
        users = [user_factory(f'shopper{i}@example.com', f'Shopper {i}') for i in range(5)]
        for user in users:
            LocationMember.objects.create(location=location, user=user, role=AccessRole.VIEWER, added_by=owner)
        return users

    def test_only_one_shopper_wins_the_reservation(self, item, shoppers):
        results = []
        errors = []

        def reserve_as(user):
            try:
                results.append((user.id, reserve(principal=Principal.for_user(user), item_id=item.id)))
            except Exception as e:
                errors.append((user, f"Unexpected error: {e}"))
            finally:
                connection.close()

        run_concurrently(reserve_as, [(user,) for user in shoppers])

        assert errors == []
        winners = [user_id for user_id, result in results if result.ok]
        losers = [result for _, result in results if not result.ok]

        assert len(winners) == 1, f"Expected exactly one reservation, got {len(winners)}"
        assert len(losers) == len(shoppers) - 1
        assert all(result.error == ErrorKind.ALREADY_RESERVED for result in losers)
        assert all(result.context['reserved_by'] == winners[0] for result in losers)

        reservation = PurchaseReservation.objects.get(item=item)
        assert reservation.user_id == winners[0]

    def test_concurrent_confirmations_buy_once(self, item, shoppers):
        """A double-submitted confirmation plus a non-holder still buy the item once."""
        first, second = shoppers[:2]
        reserve(principal=Principal.for_user(first), item_id=item.id)

        results = []
        errors = []

        def confirm_as(user):
            try:
                results.append(confirm_purchase(principal=Principal.for_user(user), item_id=item.id))
            except Exception as e:
                errors.append((user, f"Unexpected error: {e}"))
            finally:
                connection.close()

        run_concurrently(confirm_as, [(first,), (first,), (second,)])

        assert errors == []
        assert sum(1 for result in results if result.ok) == 1
        assert {result.error for result in results if not result.ok} <= {ErrorKind.NO_RESERVATION, ErrorKind.CONFLICT}

        item = Item.objects.get(id=item.id)
        assert item.is_purchased
        assert item.purchased_by_id == first.id
