from rest_framework import serializers
from .models import Invoice, InvoiceItem, InvoiceStatus


# =============================================================================
# Output Serializers
# =============================================================================

class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = [
            'id', 'description', 'quantity', 'price', 'subtotal', 'position',
            'is_buyback', 'gram', 'buyback_rate', 'custom_buyback_rate',
        ]


class InvoiceSerializer(serializers.ModelSerializer):
    """Invoice with its items and totals."""

    items = InvoiceItemSerializer(many=True, read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)

    class Meta:
        model = Invoice
        fields = [
            'id', 'store', 'store_name', 'customer',
            'invoice_number', 'invoice_date',
            'customer_name', 'customer_email', 'customer_phone',
            'customer_address', 'customer_status',
            'subtotal', 'shipping_cost', 'tax_percentage', 'tax_amount', 'total',
            'note', 'status', 'synced_at', 'items',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class InvoiceListSerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'invoice_date', 'customer_name',
            'customer_status', 'total', 'status', 'item_count', 'created_at',
        ]

    def get_item_count(self, obj):
        return len(obj.items.all())


# =============================================================================
# Input Serializers
# =============================================================================

class InvoiceItemInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=500)
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False, default=0)
    position = serializers.IntegerField(min_value=0, required=False)
    is_buyback = serializers.BooleanField(required=False, default=False)
    gram = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, allow_null=True)
    buyback_rate = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    custom_buyback_rate = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, allow_null=True
    )

    def validate(self, attrs):
        if attrs.get('is_buyback'):
            if not attrs.get('gram') or attrs['gram'] <= 0:
                raise serializers.ValidationError({'gram': 'Buyback items need a weight greater than 0'})
            if attrs.get('buyback_rate') is None and attrs.get('custom_buyback_rate') is None:
                raise serializers.ValidationError({'buyback_rate': 'Buyback items need a rate'})
        return attrs


class InvoiceInputSerializer(serializers.Serializer):
    """Create, update and upsert payload."""

    id = serializers.UUIDField(required=False)
    store_id = serializers.UUIDField(required=False, allow_null=True)
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    invoice_number = serializers.CharField(max_length=50, required=False)
    invoice_date = serializers.DateField(required=False)
    customer_name = serializers.CharField(max_length=255)
    customer_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    customer_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    customer_address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    customer_status = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    shipping_cost = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    tax_enabled = serializers.BooleanField(required=False, allow_null=True)
    tax_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, allow_null=True
    )
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=InvoiceStatus.choices, required=False)
    items = InvoiceItemInputSerializer(many=True, required=False)


class CalculateInputSerializer(serializers.Serializer):
    items = InvoiceItemInputSerializer(many=True)
    shipping_cost = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False, default=0)
    tax_enabled = serializers.BooleanField(required=False, default=False)
    tax_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, default=0
    )


class CalculateResponseSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)
    shipping_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    tax_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
