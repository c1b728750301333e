import pytest
from decimal import Decimal
from django.utils import timezone
from apps.core.types import AccessRole
from apps.sharing.models import LocationMember
from apps.wishlists.models import Item


@pytest.fixture
def member(db, location, owner, shopper):
    """The shopper as a viewer member of the owner's location."""
    LocationMember.objects.create(location=location, user=shopper, role=AccessRole.VIEWER, added_by=owner)
    return shopper


@pytest.fixture
def purchased_item(db, wishlist, owner, shopper):
    return Item.objects.create(
        list=wishlist,
        title='Espresso machine',
        price=Decimal('120.00'),
        quantity=1,
        created_by=owner,
        is_purchased=True,
        purchased_by=shopper,
        purchased_at=timezone.now(),
    )
