from django.contrib import admin
from django.utils import timezone
from .models import InviteCode, LocationMember, Share


@admin.register(Share)
class ShareAdmin(admin.ModelAdmin):
    list_display = ['resource_type', 'resource_id', 'shared_by', 'shared_with', 'role', 'expires_at', 'is_live']
    list_filter = ['resource_type', 'role', 'created_at']
    search_fields = ['shared_by__email', 'shared_with__email', 'resource_id']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']

    @admin.display(boolean=True, description='Active')
    def is_live(self, obj):
        return obj.is_active(timezone.now())

    def get_queryset(self, request):
        """Optimize query with select_related."""
        return super().get_queryset(request).select_related('shared_by', 'shared_with')


@admin.register(LocationMember)
class LocationMemberAdmin(admin.ModelAdmin):
    list_display = ['location', 'user', 'role', 'added_by', 'added_at']
    list_filter = ['role']
    search_fields = ['location__name', 'user__email']
    readonly_fields = ['added_at']

    def get_queryset(self, request):
        """Optimize query with select_related."""
        return super().get_queryset(request).select_related('location', 'user', 'added_by')


@admin.register(InviteCode)
class InviteCodeAdmin(admin.ModelAdmin):
    list_display = ['code', 'resource_type', 'resource_id', 'default_role', 'use_count', 'max_uses', 'expires_at']
    list_filter = ['resource_type', 'default_role']
    search_fields = ['code', 'created_by__email']
    readonly_fields = ['code', 'use_count', 'created_at']

    def has_add_permission(self, request):
        """Codes are generated by the invite service."""
        return False
