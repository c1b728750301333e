"""
Races between users redeeming the same invite code.

Each thread runs its own transaction, so only the row lock on the code
keeps the use count honest.
"""

import threading

import pytest
from django.db import connection

from apps.core.exceptions import ErrorKind
from apps.core.types import Principal, ResourceRef
from apps.sharing.models import InviteCode, Share
from apps.sharing.services import create_invite_code, redeem_invite_code


@pytest.mark.django_db(transaction=True)
class TestConcurrentRedemption:

    @pytest.fixture
    def redeemers(self, user_factory):
        return [user_factory(f'redeemer{i}@example.com', f'Redeemer {i}') for i in range(5)]

    def test_last_use_goes_to_exactly_one_user(self, owner, wishlist, redeemers):
        invite = create_invite_code(
            principal=Principal.for_user(owner),
            resource=ResourceRef.list(wishlist.id),
            default_role='viewer',
            max_uses=1,
        ).value

        results = []
        errors = []

        def redeem_as(user):
            try:
                results.append(redeem_invite_code(principal=Principal.for_user(user), code=invite.code))
            except Exception as e:
                errors.append((user, f"Unexpected error: {e}"))
            finally:
                connection.close()

        threads = [threading.Thread(target=redeem_as, args=(user,)) for user in redeemers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert sum(1 for result in results if result.ok) == 1
        assert [result.error for result in results if not result.ok] == [ErrorKind.EXHAUSTED] * (len(redeemers) - 1)

        assert InviteCode.objects.get(id=invite.id).use_count == 1
        assert Share.objects.filter(resource_id=wishlist.id).count() == 1
