from rest_framework import serializers

from .models import ChangeEvent, SyncAction, SyncEntity, SyncQueueItem


class SyncQueueItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SyncQueueItem
        fields = [
            'id', 'action', 'entity_type', 'entity_id', 'data',
            'timestamp', 'retry_count', 'last_error',
        ]
        read_only_fields = ['id', 'timestamp', 'retry_count', 'last_error']


class SyncItemInputSerializer(serializers.Serializer):
    """One offline write, as queued or pushed by a client."""

    action = serializers.ChoiceField(choices=SyncAction.choices)
    entity_type = serializers.ChoiceField(choices=SyncEntity.choices)
    entity_id = serializers.CharField(max_length=64)
    data = serializers.JSONField(required=False, default=dict)

    def validate_data(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Data must be an object")
        return value


class PushInputSerializer(serializers.Serializer):
    items = SyncItemInputSerializer(many=True, allow_empty=False)


class PushResultSerializer(serializers.Serializer):
    index = serializers.IntegerField()
    entity_id = serializers.CharField()
    success = serializers.BooleanField()
    error = serializers.CharField(allow_null=True)


class PushResponseSerializer(serializers.Serializer):
    results = PushResultSerializer(many=True)


class SyncResultSerializer(serializers.Serializer):
    processed = serializers.IntegerField()
    succeeded = serializers.IntegerField()
    failed = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.CharField())


class SyncStatusSerializer(serializers.Serializer):
    is_syncing = serializers.BooleanField()
    queue_count = serializers.IntegerField()
    auto_sync_enabled = serializers.BooleanField()


class ChangeEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChangeEvent
        fields = ['id', 'table', 'event', 'record_id', 'payload', 'created_at']
        read_only_fields = fields


class ImportInputSerializer(serializers.Serializer):
    settings = serializers.DictField(required=False, allow_null=True)
    invoices = serializers.ListField(child=serializers.DictField(), required=False, default=list)


class ImportResultSerializer(serializers.Serializer):
    settings_synced = serializers.BooleanField()
    invoices_synced = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.CharField())
