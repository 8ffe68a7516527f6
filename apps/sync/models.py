# ==========================================
# apps/sync/models.py
# ==========================================

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone
import uuid


class SyncAction(models.TextChoices):
    CREATE = 'create', 'Create'
    UPDATE = 'update', 'Update'
    UPSERT = 'upsert', 'Upsert'
    DELETE = 'delete', 'Delete'


class SyncEntity(models.TextChoices):
    SETTINGS = 'settings', 'Settings'
    INVOICE = 'invoice', 'Invoice'
    INVOICE_ITEM = 'invoice_item', 'Invoice item'


class ChangeEventType(models.TextChoices):
    INSERT = 'INSERT', 'Insert'
    UPDATE = 'UPDATE', 'Update'
    DELETE = 'DELETE', 'Delete'


class SyncQueueItem(models.Model):
    """A write made while offline, waiting to be replayed."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='sync_queue_items')
    action = models.CharField(max_length=10, choices=SyncAction.choices)
    entity_type = models.CharField(max_length=20, choices=SyncEntity.choices)
    entity_id = models.CharField(max_length=64)
    data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    timestamp = models.DateTimeField(default=timezone.now)
    retry_count = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'sync_queue'
        ordering = ['timestamp']
        indexes = [
            models.Index(fields=['user', 'timestamp'], name='sync_queue_user_time_idx'),
        ]

    def __str__(self):
        return f"{self.entity_type} {self.action} {self.entity_id}"


class ChangeEvent(models.Model):
    """Row-level change to an owner's data, read by clients to merge updates."""

    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='change_events')
    table = models.CharField(max_length=50)
    event = models.CharField(max_length=10, choices=ChangeEventType.choices)
    record_id = models.CharField(max_length=64)
    payload = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'change_events'
        ordering = ['id']
        indexes = [
            models.Index(fields=['user', 'table', 'created_at'], name='change_events_user_table_idx'),
        ]

    def __str__(self):
        return f"{self.event} {self.table} {self.record_id}"
