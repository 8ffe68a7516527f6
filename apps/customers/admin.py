# ==========================================
# apps/customers/admin.py
# ==========================================

from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'status', 'store', 'is_active', 'created_at']
    list_filter = ['status', 'is_active', 'created_at']
    search_fields = ['name', 'phone', 'email', 'store__name']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['store']
