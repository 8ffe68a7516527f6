from rest_framework import serializers
from .models import Store, StoreContact, UserPreferences


# =============================================================================
# Input Serializers
# =============================================================================

class PrimaryContactInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    title = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    signature = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class InvoiceDateInputSerializer(serializers.Serializer):
    """Date the invoice number is issued for; today when omitted."""

    invoice_date = serializers.DateField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class StoreContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = StoreContact
        fields = ['id', 'store', 'name', 'title', 'signature', 'is_primary', 'created_at', 'updated_at']
        read_only_fields = ['id', 'store', 'created_at', 'updated_at']


class StoreSerializer(serializers.ModelSerializer):
    """Store profile with its primary contact."""

    primary_contact = serializers.SerializerMethodField()

    class Meta:
        model = Store
        fields = [
            'id', 'name', 'slug', 'is_active',
            'logo', 'address', 'whatsapp', 'phone', 'email', 'website',
            'store_description', 'tagline', 'store_number', 'payment_method',
            'brand_color',
            'invoice_prefix', 'store_code', 'invoice_number_format',
            'next_invoice_number', 'invoice_number_padding',
            'reset_counter_daily', 'daily_invoice_date', 'daily_invoice_counter',
            'primary_contact',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'slug', 'is_active', 'next_invoice_number',
            'daily_invoice_date', 'daily_invoice_counter',
            'created_at', 'updated_at',
        ]

    def get_primary_contact(self, obj):
        contact = obj.get_primary_contact()
        return StoreContactSerializer(contact).data if contact else None


class UserPreferencesSerializer(serializers.ModelSerializer):
    default_store = serializers.PrimaryKeyRelatedField(
        queryset=Store.objects.filter(is_active=True),
        allow_null=True,
        required=False,
    )

    class Meta:
        model = UserPreferences
        fields = [
            'preferred_language', 'timezone', 'date_format', 'currency',
            'default_store', 'tax_enabled', 'tax_percentage', 'export_quality',
            'updated_at',
        ]
        read_only_fields = ['updated_at']
