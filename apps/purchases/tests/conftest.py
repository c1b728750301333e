import pytest
from datetime import timedelta
from django.utils import timezone
from apps.core.types import AccessRole, ShareableResource
from apps.purchases.models import PurchaseReservation
from apps.sharing.models import LocationMember, Share


@pytest.fixture
def household(db, location, owner, shopper, other_shopper):
    """Both shoppers are viewer members of the owner's location."""
    for user in (shopper, other_shopper):
        LocationMember.objects.create(location=location, user=user, role=AccessRole.VIEWER, added_by=owner)
    return location


@pytest.fixture
def editor(user_factory, wishlist, owner):
    """User with an editor share on the test list."""
    user = user_factory('editor@example.com', 'Editor')
    Share.objects.create(
        resource_type=ShareableResource.LIST,
        resource_id=wishlist.id,
        shared_by=owner,
        shared_with=user,
        role=AccessRole.EDITOR,
    )
    return user


@pytest.fixture
def expired_reservation(db, household, item, other_shopper):
    """A reservation by the other shopper whose TTL has passed."""
    now = timezone.now()
    return PurchaseReservation.objects.create(
        item=item,
        user=other_shopper,
        reserved_at=now - timedelta(minutes=30),
        expires_at=now - timedelta(minutes=20),
    )
