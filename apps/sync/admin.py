# ==========================================
# apps/sync/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import ChangeEvent, SyncQueueItem


@admin.register(SyncQueueItem)
class SyncQueueItemAdmin(admin.ModelAdmin):
    list_display = ['entity_type', 'action', 'entity_id', 'user', 'retry_badge', 'timestamp']
    list_filter = ['entity_type', 'action']
    search_fields = ['entity_id', 'user__email']
    readonly_fields = ['timestamp', 'last_error']
    raw_id_fields = ['user']

    def retry_badge(self, obj):
        color = '#10b981' if obj.retry_count == 0 else '#ef4444'
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            color, obj.retry_count,
        )
    retry_badge.short_description = 'Retries'


@admin.register(ChangeEvent)
class ChangeEventAdmin(admin.ModelAdmin):
    list_display = ['table', 'event', 'record_id', 'user', 'created_at']
    list_filter = ['table', 'event']
    search_fields = ['record_id', 'user__email']
    readonly_fields = ['user', 'table', 'event', 'record_id', 'payload', 'created_at']
