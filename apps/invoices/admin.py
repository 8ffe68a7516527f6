# ==========================================
# apps/invoices/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    fields = ['position', 'description', 'quantity', 'price', 'is_buyback', 'gram', 'buyback_rate', 'subtotal']
    readonly_fields = ['subtotal']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    """
    Admin interface for invoices.

    Provides:
    - Listing with customer, total and sync status
    - Inline items
    - Filtering by status and date
    """

    list_display = ['invoice_number', 'customer_name', 'user', 'store', 'total', 'status_badge', 'invoice_date']
    list_filter = ['status', 'invoice_date', 'created_at']
    search_fields = ['invoice_number', 'customer_name', 'user__email']
    readonly_fields = ['subtotal', 'tax_amount', 'total', 'synced_at', 'created_at', 'updated_at']
    raw_id_fields = ['user', 'store', 'customer']
    date_hierarchy = 'invoice_date'
    inlines = [InvoiceItemInline]

    def status_badge(self, obj):
        colors = {
            'draft': '#6b7280',
            'pending': '#f59e0b',
            'synced': '#10b981',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px; font-weight: bold;">{}</span>',
            colors.get(obj.status, '#6b7280'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'
