"""
Sharing app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and row locks, and return
a ServiceResult instead of raising for expected failures.
"""

from .share_management import (
    BatchShareOutcome,
    create_share,
    revoke_share,
    share_with_many,
)

from .guest_links import (
    GuestLink,
    create_guest_link,
    revoke_guest_link,
)

from .invite_management import (
    INVITE_CODE_ALPHABET,
    InviteRedemption,
    create_invite_code,
    redeem_invite_code,
)

from .membership_management import (
    add_location_member,
    remove_location_member,
)


__all__ = [
    # Shares
    'BatchShareOutcome',
    'create_share',
    'revoke_share',
    'share_with_many',

    # Guest links
    'GuestLink',
    'create_guest_link',
    'revoke_guest_link',

    # Invite codes
    'INVITE_CODE_ALPHABET',
    'InviteRedemption',
    'create_invite_code',
    'redeem_invite_code',

    # Location membership
    'add_location_member',
    'remove_location_member',
]
