"""
Domain-specific exceptions shared by the sharing and purchases apps.

These exceptions represent expected business outcomes. Services raise them
inside their transaction so every partial write is rolled back, and the
@service_result decorator turns them into typed results before they reach
calling code.
"""

from django.db import models


class ErrorKind(models.TextChoices):
    NOT_FOUND = 'not_found', 'Not found'
    FORBIDDEN = 'forbidden', 'Forbidden'
    NOT_OWNER = 'not_owner', 'Not owner'
    SELF_SHARE = 'self_share', 'Self share'
    ALREADY_RESERVED = 'already_reserved', 'Already reserved'
    ALREADY_PURCHASED = 'already_purchased', 'Already purchased'
    NO_RESERVATION = 'no_reservation', 'No reservation'
    CONFLICT = 'conflict', 'Conflict'
    EXPIRED = 'expired', 'Expired'
    EXHAUSTED = 'exhausted', 'Exhausted'


class GiftListServiceError(Exception):
    """Base exception for all expected service failures."""

    kind = None
    default_message = 'Service error'

    def __init__(self, message=None, **context):
        self.context = context
        super().__init__(message or self.default_message)


class NotFoundError(GiftListServiceError):
    """Raised when a resource or grantee is absent, or hidden from the caller."""
    kind = ErrorKind.NOT_FOUND
    default_message = 'Not found.'


class ForbiddenError(GiftListServiceError):
    """Raised when the caller can see a resource but lacks the required role."""
    kind = ErrorKind.FORBIDDEN
    default_message = 'You do not have permission to perform this action.'


class NotOwnerError(ForbiddenError):
    """Raised when an operation requires ownership specifically."""
    kind = ErrorKind.NOT_OWNER
    default_message = 'Only the owner can perform this action.'


class SelfShareError(GiftListServiceError):
    kind = ErrorKind.SELF_SHARE
    default_message = 'You cannot share a resource with yourself.'


class AlreadyReservedError(GiftListServiceError):
    kind = ErrorKind.ALREADY_RESERVED
    default_message = 'This item is reserved by another shopper.'


class AlreadyPurchasedError(GiftListServiceError):
    kind = ErrorKind.ALREADY_PURCHASED
    default_message = 'This item has already been purchased.'


class NoReservationError(GiftListServiceError):
    """Raised when confirming a purchase without holding a live reservation."""
    kind = ErrorKind.NO_RESERVATION
    default_message = 'You must reserve this item before confirming the purchase.'


class ConflictError(GiftListServiceError):
    """Raised when another commit won the race for the same row."""
    kind = ErrorKind.CONFLICT
    default_message = 'Someone else completed this action first.'


class ExpiredError(GiftListServiceError):
    kind = ErrorKind.EXPIRED
    default_message = 'This has expired.'


class ExhaustedError(GiftListServiceError):
    kind = ErrorKind.EXHAUSTED
    default_message = 'This invite code has no uses left.'
