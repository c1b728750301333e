from django.conf import settings
from django.db import models
from django.utils import timezone
import uuid


class ReservationQuerySet(models.QuerySet):

    def live(self, now=None):
        return self.filter(expires_at__gt=now or timezone.now())

    def expired(self, now=None):
        return self.filter(expires_at__lte=now or timezone.now())


class PurchaseReservation(models.Model):
    """
    Short-lived advisory lock on an item while a shopper buys it.

    The one-to-one on ``item`` is the unique index that keeps at most one
    reservation row per item. An expired row counts as absent and is taken
    over by the next reserver.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    item = models.OneToOneField('wishlists.Item', on_delete=models.CASCADE, related_name='reservation')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reservations')
    reserved_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()

    objects = ReservationQuerySet.as_manager()

    class Meta:
        db_table = 'purchase_reservations'
        indexes = [
            models.Index(fields=['user', 'expires_at'], name='reservations_user_idx'),
            models.Index(fields=['expires_at'], name='reservations_expires_idx'),
        ]
        ordering = ['-reserved_at']

    def __str__(self):
        return f"{self.item_id} reserved by {self.user_id} until {self.expires_at:%H:%M}"

    def is_live(self, now=None) -> bool:
        return self.expires_at > (now or timezone.now())

    def is_held_by(self, user_id) -> bool:
        return user_id is not None and self.user_id == user_id
