import re

from rest_framework import serializers
from .models import Customer

PHONE_PATTERN = re.compile(r'^\+?[0-9]{8,15}$')


class CustomerSerializer(serializers.ModelSerializer):
    """
    Customer with input validation.

    Phone numbers are stored without spaces or dashes.
    """

    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'store', 'name', 'phone', 'address', 'email', 'notes',
            'status', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'store', 'is_active', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError("Name must be at least 2 characters")
        return value

    def validate_phone(self, value):
        value = re.sub(r'[\s-]', '', value)
        if not PHONE_PATTERN.match(value):
            raise serializers.ValidationError(
                "Invalid phone number format. Use 8-15 digits, optional + prefix"
            )
        return value

    def validate_address(self, value):
        if len(value.strip()) < 5:
            raise serializers.ValidationError("Address must be at least 5 characters")
        return value

    def validate_email(self, value):
        return value or None


class CustomerCreateSerializer(CustomerSerializer):
    store_id = serializers.UUIDField(write_only=True)

    class Meta(CustomerSerializer.Meta):
        fields = CustomerSerializer.Meta.fields + ['store_id']
