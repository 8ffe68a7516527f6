# ==========================================
# apps/stores/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Store, StoreContact, UserPreferences


class StoreContactInline(admin.TabularInline):
    model = StoreContact
    extra = 0
    fields = ['name', 'title', 'is_primary']


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    """
    Admin interface for stores.

    Provides:
    - Store listing with owner and brand color
    - Inline contacts
    - Filtering by active state
    """

    list_display = ['name', 'user', 'brand_color_swatch', 'invoice_prefix', 'next_invoice_number', 'is_active', 'created_at']
    list_filter = ['is_active', 'reset_counter_daily', 'created_at']
    search_fields = ['name', 'slug', 'user__email']
    readonly_fields = ['slug', 'created_at', 'updated_at']
    raw_id_fields = ['user']
    inlines = [StoreContactInline]

    fieldsets = (
        ('Store', {
            'fields': ('user', 'name', 'slug', 'is_active'),
        }),
        ('Branding', {
            'fields': ('logo', 'brand_color', 'tagline', 'store_description'),
        }),
        ('Contact', {
            'fields': ('address', 'whatsapp', 'phone', 'email', 'website', 'store_number', 'payment_method'),
        }),
        ('Invoice Numbering', {
            'fields': ('invoice_prefix', 'store_code', 'invoice_number_format', 'next_invoice_number',
                       'invoice_number_padding', 'reset_counter_daily', 'daily_invoice_date',
                       'daily_invoice_counter'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def brand_color_swatch(self, obj):
        return format_html(
            '<span style="display: inline-block; width: 14px; height: 14px; '
            'border-radius: 3px; background: {};"></span> {}',
            obj.brand_color, obj.brand_color,
        )
    brand_color_swatch.short_description = 'Brand color'


@admin.register(UserPreferences)
class UserPreferencesAdmin(admin.ModelAdmin):
    list_display = ['user', 'currency', 'tax_enabled', 'tax_percentage', 'export_quality']
    search_fields = ['user__email']
    raw_id_fields = ['user', 'default_store']
