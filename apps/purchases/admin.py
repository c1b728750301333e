# ==========================================
# apps/purchases/admin.py
# ==========================================

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html
from .models import PurchaseReservation


@admin.register(PurchaseReservation)
class PurchaseReservationAdmin(admin.ModelAdmin):
    """
    Admin interface for reservations.

    Read-only: reservations are created and cleared by the reservation
    services. Expired rows can be deleted in bulk.
    """

    list_display = [
        'item',
        'user',
        'reserved_at',
        'expires_at',
        'status_badge',
    ]

    list_filter = ['reserved_at', 'expires_at']
    search_fields = ['item__title', 'user__email', 'user__display_name']
    readonly_fields = ['item', 'user', 'reserved_at', 'expires_at']
    ordering = ['-reserved_at']
    actions = ['delete_expired']

    def status_badge(self, obj):
        """Display live/expired as colored badge."""
        if obj.is_live(timezone.now()):
            bg, fg, label = '#6B8E5E', 'white', 'Live'
        else:
            bg, fg, label = '#E5C49A', '#2C1810', 'Expired'
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, label
        )
    status_badge.short_description = 'Status'

    @admin.action(description='Delete expired reservations')
    def delete_expired(self, request, queryset):
        count, _ = queryset.expired().delete()
        self.message_user(request, f'Deleted {count} expired reservation(s).')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        """Optimize query with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related('item', 'user')
