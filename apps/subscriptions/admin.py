# ==========================================
# apps/subscriptions/admin.py
# ==========================================

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html
from .models import (
    SubscriptionPlan,
    UserSubscription,
    InvoiceUsage,
    PaymentTransaction,
    PaymentStatus,
)


@admin.register(SubscriptionPlan)
class SubscriptionPlanAdmin(admin.ModelAdmin):
    """Pricing page plans and their feature columns."""

    list_display = ['name', 'tier', 'price_formatted', 'invoice_limit', 'is_active', 'is_popular', 'sort_order']
    list_filter = ['is_active', 'tier']
    ordering = ['sort_order']

    fieldsets = (
        ('Plan', {
            'fields': ('tier', 'name', 'description', 'price', 'billing_period',
                       'invoice_limit', 'duration', 'features'),
        }),
        ('Feature Columns', {
            'fields': ('template_count', 'has_logo', 'has_signature', 'has_custom_colors',
                       'history_limit', 'history_type', 'has_dashboard_totals',
                       'export_qualities', 'has_monthly_report', 'has_customer_book'),
        }),
        ('Display', {
            'fields': ('is_active', 'is_popular', 'sort_order'),
        }),
    )


@admin.register(UserSubscription)
class UserSubscriptionAdmin(admin.ModelAdmin):
    list_display = ['user', 'tier', 'current_month_count', 'invoice_limit', 'month_year', 'subscription_end_date']
    list_filter = ['tier']
    search_fields = ['user__email']
    raw_id_fields = ['user']


@admin.register(InvoiceUsage)
class InvoiceUsageAdmin(admin.ModelAdmin):
    list_display = ['user', 'month_year', 'invoice_count']
    search_fields = ['user__email', 'month_year']
    raw_id_fields = ['user']


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    """
    Admin interface for Mayar payments.

    Provides:
    - Status badges
    - Search by provider id and user email
    - Manual verification action
    """

    list_display = ['mayar_invoice_id', 'user', 'tier', 'amount', 'status_badge', 'verified_at', 'created_at']
    list_filter = ['status', 'tier', 'created_at']
    search_fields = ['mayar_invoice_id', 'user__email']
    readonly_fields = ['completed_at', 'webhook_verified_at', 'verified_at', 'created_at', 'updated_at']
    raw_id_fields = ['user']
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        """Display payment status as colored badge."""
        colors = {
            PaymentStatus.PENDING: ('#fbbf24', '#1f2937'),
            PaymentStatus.COMPLETED: ('#10b981', 'white'),
            PaymentStatus.FAILED: ('#B85C5C', 'white'),
            PaymentStatus.EXPIRED: ('#ccc', '#666'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    actions = ['mark_verified']

    @admin.action(description='Mark selected payments as verified')
    def mark_verified(self, request, queryset):
        count = queryset.update(verified_at=timezone.now())
        self.message_user(request, f'Verified {count} payment(s).')
