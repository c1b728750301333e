from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from decimal import Decimal
import uuid


def current_year():
    return timezone.now().year


class Priority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'


class Location(models.Model):
    """A household grouping lists; exclusively owned by one user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='owned_locations')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'locations'
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='locations_owner_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class WishList(models.Model):
    """One person's wishlist for a year, inside a location."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='lists')
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='owned_lists')
    year = models.PositiveIntegerField(
        default=current_year,
        validators=[MinValueValidator(2000), MaxValueValidator(2100)],
    )
    is_active = models.BooleanField(default=True)
    is_public = models.BooleanField(default=False)

    # Minted on demand by the sharing app; at most one live token per list
    guest_access_token = models.CharField(max_length=128, unique=True, null=True, blank=True, editable=False)
    guest_access_expires_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'lists'
        indexes = [
            models.Index(fields=['location', 'year'], name='lists_location_year_idx'),
            models.Index(fields=['owner', 'year'], name='lists_owner_year_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(year__gte=2000) & Q(year__lte=2100),
                name='lists_valid_year',
            ),
        ]
        ordering = ['-year', '-created_at']

    def __str__(self):
        return f"{self.title} ({self.year})"

    def is_owned_by(self, user_id) -> bool:
        return user_id is not None and self.owner_id == user_id


class Item(models.Model):
    """
    A wish on a list.

    Purchase fields move together: they are only ever written through the
    purchase transitions in apps.purchases.services, and the check
    constraint below rejects any other combination.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    list = models.ForeignKey(WishList, on_delete=models.CASCADE, related_name='items')
    title = models.CharField(max_length=300)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    currency = models.CharField(max_length=3, default='USD')
    url = models.URLField(blank=True, max_length=1000)
    image_url = models.URLField(blank=True, max_length=1000)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='created_items')

    is_purchased = models.BooleanField(default=False)
    # PROTECT: nulling the purchaser alone would break the consistency constraint
    purchased_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='purchased_items'
    )
    purchased_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'items'
        indexes = [
            models.Index(fields=['list', 'priority'], name='items_list_priority_idx'),
            models.Index(fields=['list', 'is_purchased'], name='items_list_purchased_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(is_purchased=False, purchased_by__isnull=True, purchased_at__isnull=True)
                    | Q(is_purchased=True, purchased_by__isnull=False, purchased_at__isnull=False)
                ),
                name='items_purchased_consistency',
            ),
            models.CheckConstraint(
                condition=Q(price__isnull=True) | Q(price__gte=0),
                name='items_valid_price',
            ),
            models.CheckConstraint(condition=Q(quantity__gte=1), name='items_valid_quantity'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return self.title

    @property
    def line_total(self):
        if self.price is None:
            return Decimal('0.00')
        return self.price * self.quantity
