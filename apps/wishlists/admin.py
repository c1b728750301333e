from django.contrib import admin
from .models import Location, WishList, Item


class ItemInline(admin.TabularInline):
    """Inline admin for items within a list."""
    model = Item
    extra = 0
    fields = ['title', 'price', 'currency', 'quantity', 'priority', 'is_purchased']
    readonly_fields = ['is_purchased']


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'created_at']
    search_fields = ['name', 'owner__email']
    ordering = ['-created_at']

    def get_queryset(self, request):
        """Optimize query with select_related."""
        return super().get_queryset(request).select_related('owner')


@admin.register(WishList)
class WishListAdmin(admin.ModelAdmin):
    """
    Admin interface for lists.

    The guest access token is never displayed; only whether one is set.
    """

    list_display = ['title', 'owner', 'location', 'year', 'is_active', 'is_public', 'has_guest_link']
    list_filter = ['year', 'is_active', 'is_public']
    search_fields = ['title', 'owner__email', 'location__name']
    readonly_fields = ['guest_access_expires_at', 'created_at', 'updated_at']
    inlines = [ItemInline]

    fieldsets = (
        ('List Information', {
            'fields': ('title', 'description', 'location', 'owner', 'year')
        }),
        ('Visibility', {
            'fields': ('is_active', 'is_public', 'guest_access_expires_at')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    @admin.display(boolean=True, description='Guest link')
    def has_guest_link(self, obj):
        return bool(obj.guest_access_token)

    def get_queryset(self, request):
        """Optimize query with select_related."""
        return super().get_queryset(request).select_related('owner', 'location')


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ['title', 'list', 'price', 'currency', 'quantity', 'priority', 'is_purchased']
    list_filter = ['priority', 'is_purchased', 'currency']
    search_fields = ['title', 'list__title']
    # Purchase fields change only through the reservation engine
    readonly_fields = ['is_purchased', 'purchased_by', 'purchased_at', 'created_at', 'updated_at']

    def get_queryset(self, request):
        """Optimize query with select_related."""
        return super().get_queryset(request).select_related('list', 'purchased_by')
