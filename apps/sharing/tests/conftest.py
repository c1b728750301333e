import pytest
from apps.core.types import AccessRole, ShareableResource
from apps.sharing.models import LocationMember, Share


@pytest.fixture
def grantee(user_factory):
    """User B: no prior relation to the owner's resources."""
    return user_factory('grantee@example.com', 'Grantee')


@pytest.fixture
def third_user(user_factory):
    """User C."""
    return user_factory('third@example.com', 'Third User')


@pytest.fixture
def list_share(db, wishlist, owner, grantee):
    """Viewer share on the test list for the grantee."""
    return Share.objects.create(
        resource_type=ShareableResource.LIST,
        resource_id=wishlist.id,
        shared_by=owner,
        shared_with=grantee,
        role=AccessRole.VIEWER,
    )


@pytest.fixture
def location_member(db, location, owner, grantee):
    """Grantee as editor member of the test location."""
    return LocationMember.objects.create(
        location=location,
        user=grantee,
        role=AccessRole.EDITOR,
        added_by=owner,
    )
