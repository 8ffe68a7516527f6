# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count
from django.utils.html import format_html

from apps.subscriptions.models import SubscriptionTier
from .models import User

TIER_COLORS = {
    SubscriptionTier.FREE: '#9ca3af',
    SubscriptionTier.PREMIUM: '#d97706',
}


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Store owner accounts.

    The list shows the plan badge and how many stores each owner runs;
    back-office admins are the accounts with ``is_staff`` set.
    """

    list_display = ['email', 'display_name', 'tier_badge', 'store_count', 'is_active', 'is_staff', 'created_at']
    list_filter = ['is_active', 'is_staff', 'subscription__tier']
    search_fields = ['email', 'display_name']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'last_login']
    filter_horizontal = ['groups', 'user_permissions']

    fieldsets = (
        ('Account', {'fields': ('email', 'display_name', 'password')}),
        ('Access', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Activity', {'fields': ('created_at', 'last_login'), 'classes': ('collapse',)}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    actions = ['deactivate_owners', 'grant_backoffice_access']

    def get_queryset(self, request):
        return (
            super().get_queryset(request)
            .select_related('subscription')
            .annotate(_store_count=Count('stores', distinct=True))
        )

    def tier_badge(self, obj):
        subscription = getattr(obj, 'subscription', None)
        tier = subscription.tier if subscription else SubscriptionTier.FREE
        return format_html(
            '<span style="background: {}; color: white; padding: 2px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            TIER_COLORS.get(tier, '#9ca3af'), tier,
        )
    tier_badge.short_description = 'Tier'
    tier_badge.admin_order_field = 'subscription__tier'

    def store_count(self, obj):
        return obj._store_count
    store_count.short_description = 'Stores'
    store_count.admin_order_field = '_store_count'

    @admin.action(description='Deactivate selected owners')
    def deactivate_owners(self, request, queryset):
        # Superusers stay active so the admin cannot lock itself out
        count = queryset.filter(is_superuser=False).update(is_active=False)
        self.message_user(request, f'Deactivated {count} account(s).')

    @admin.action(description='Grant back-office access')
    def grant_backoffice_access(self, request, queryset):
        count = queryset.update(is_staff=True)
        self.message_user(request, f'{count} account(s) can now open the back-office.')
