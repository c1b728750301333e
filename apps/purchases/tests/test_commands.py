import pytest
from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.utils import timezone

from apps.purchases.models import PurchaseReservation


@pytest.mark.django_db
class TestPurgeExpiredReservations:

    def test_dry_run_changes_nothing(self, expired_reservation):
        out = StringIO()

        call_command('purge_expired_reservations', '--dry-run', stdout=out)

        assert 'Found 1 expired reservation(s)' in out.getvalue()
        assert 'Wool scarf' in out.getvalue()
        assert PurchaseReservation.objects.count() == 1

    def test_purge_keeps_live_reservations(self, expired_reservation, shopper, wishlist, owner):
        from apps.wishlists.models import Item

        other_item = Item.objects.create(list=wishlist, title='Board game', created_by=owner)
        live = PurchaseReservation.objects.create(
            item=other_item,
            user=shopper,
            expires_at=timezone.now() + timedelta(minutes=10),
        )
        out = StringIO()

        call_command('purge_expired_reservations', stdout=out)

        assert 'Deleted 1 expired reservation(s).' in out.getvalue()
        assert list(PurchaseReservation.objects.all()) == [live]

    def test_nothing_to_do(self, db):
        out = StringIO()

        call_command('purge_expired_reservations', stdout=out)

        assert 'No expired reservations. All good!' in out.getvalue()
