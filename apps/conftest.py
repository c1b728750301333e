import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.core.types import Principal
from apps.wishlists.models import Location, WishList, Item


def make_user(email, display_name=''):
    return User.objects.create_user(
        email=email,
        password='TestPass123!',
        display_name=display_name,
    )


@pytest.fixture
def user_factory(db):
    """Return a factory creating users by email."""
    return make_user


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Return a factory building an API client authenticated as a user."""
    def build(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return build


@pytest.fixture
def owner(db):
    """Owner of the test location and list (the gift recipient)."""
    return make_user('owner@example.com', 'List Owner')


@pytest.fixture
def shopper(db):
    return make_user('shopper@example.com', 'Shopper')


@pytest.fixture
def other_shopper(db):
    return make_user('other@example.com', 'Other Shopper')


@pytest.fixture
def stranger(db):
    """A user with no relation to any test resource."""
    return make_user('stranger@example.com', 'Stranger')


@pytest.fixture
def location(db, owner):
    return Location.objects.create(name='Smith Household', owner=owner)


@pytest.fixture
def wishlist(db, location, owner):
    return WishList.objects.create(title="Alice's Christmas", location=location, owner=owner, year=2026)


@pytest.fixture
def item(db, wishlist, owner):
    return Item.objects.create(
        list=wishlist,
        title='Wool scarf',
        price=Decimal('29.99'),
        quantity=1,
        created_by=owner,
    )


@pytest.fixture
def principal_of():
    """Return a factory building the Principal for a user (or None for anonymous)."""
    def build(user=None, guest_token=None):
        if user is None:
            return Principal.anonymous(guest_token=guest_token)
        return Principal.for_user(user, guest_token=guest_token)
    return build
