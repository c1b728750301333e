from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
import uuid

from apps.core.types import AccessRole, ShareableResource


class ExpiringQuerySet(models.QuerySet):

    def active(self, now=None):
        now = now or timezone.now()
        return self.filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))

    def expired(self, now=None):
        now = now or timezone.now()
        return self.filter(expires_at__isnull=False, expires_at__lte=now)


class Share(models.Model):
    """Time-boundable access grant from a resource owner to another user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    resource_type = models.CharField(max_length=20, choices=ShareableResource.choices)
    resource_id = models.UUIDField()
    shared_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='shares_given')
    shared_with = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='shares_received')
    role = models.CharField(max_length=20, choices=AccessRole.choices, default=AccessRole.VIEWER)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    objects = ExpiringQuerySet.as_manager()

    class Meta:
        db_table = 'shares'
        constraints = [
            models.UniqueConstraint(
                fields=['resource_type', 'resource_id', 'shared_with'],
                name='shares_one_per_grantee',
            ),
            models.CheckConstraint(condition=~Q(shared_by=F('shared_with')), name='shares_no_self_share'),
        ]
        indexes = [
            models.Index(fields=['resource_type', 'resource_id'], name='shares_resource_idx'),
            models.Index(fields=['shared_with', 'resource_type'], name='shares_grantee_idx'),
            models.Index(fields=['expires_at'], name='shares_expires_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.resource_type}:{self.resource_id} -> {self.shared_with_id} ({self.role})"

    def is_active(self, now=None) -> bool:
        now = now or timezone.now()
        return self.expires_at is None or self.expires_at > now


class LocationMember(models.Model):
    """Standing membership on a location; unlike a share it never expires."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    location = models.ForeignKey('wishlists.Location', on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='location_memberships')
    role = models.CharField(max_length=20, choices=AccessRole.choices, default=AccessRole.VIEWER)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='location_members_added'
    )
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'location_members'
        unique_together = [['location', 'user']]
        indexes = [
            models.Index(fields=['user'], name='location_members_user_idx'),
        ]
        ordering = ['added_at']

    def __str__(self):
        return f"{self.user_id} in {self.location_id} ({self.role})"


class InviteCode(models.Model):
    """Short human-typeable code granting a role on a location or list."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=16, unique=True, db_index=True, editable=False)
    resource_type = models.CharField(max_length=20, choices=ShareableResource.choices)
    resource_id = models.UUIDField()
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='invite_codes')
    default_role = models.CharField(max_length=20, choices=AccessRole.choices, default=AccessRole.VIEWER)
    max_uses = models.PositiveIntegerField(default=1)
    use_count = models.PositiveIntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ExpiringQuerySet.as_manager()

    class Meta:
        db_table = 'invite_codes'
        constraints = [
            models.CheckConstraint(condition=Q(max_uses__gte=1), name='invite_codes_min_uses'),
            models.CheckConstraint(condition=Q(use_count__lte=F('max_uses')), name='invite_codes_use_limit'),
        ]
        indexes = [
            models.Index(fields=['resource_type', 'resource_id'], name='invite_codes_resource_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} ({self.use_count}/{self.max_uses})"

    @property
    def uses_left(self) -> int:
        return max(0, self.max_uses - self.use_count)

    def is_expired(self, now=None) -> bool:
        now = now or timezone.now()
        return self.expires_at is not None and self.expires_at <= now
