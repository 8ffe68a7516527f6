from rest_framework import serializers

from .models import PaymentTransaction, SubscriptionPlan, SubscriptionTier


# =============================================================================
# Input Serializers
# =============================================================================

class CreatePaymentSerializer(serializers.Serializer):
    """Tier to buy; only paid tiers can be bought."""

    tier = serializers.ChoiceField(choices=[SubscriptionTier.PREMIUM])


class PaymentLookupSerializer(serializers.Serializer):
    mayar_invoice_id = serializers.CharField(max_length=255)


# =============================================================================
# Output Serializers
# =============================================================================

class SubscriptionStatusSerializer(serializers.Serializer):
    tier = serializers.CharField()
    invoice_limit = serializers.IntegerField()
    current_month_count = serializers.IntegerField()
    remaining_invoices = serializers.IntegerField()
    month_year = serializers.CharField()
    reset_date = serializers.CharField()
    subscription_start_date = serializers.DateTimeField()
    subscription_end_date = serializers.DateTimeField(allow_null=True)
    is_premium = serializers.BooleanField()


class TierFeaturesSerializer(serializers.Serializer):
    tier = serializers.CharField()
    invoice_limit = serializers.IntegerField()
    template_count = serializers.IntegerField()
    has_logo = serializers.BooleanField()
    has_signature = serializers.BooleanField()
    has_custom_colors = serializers.BooleanField()
    history_limit = serializers.IntegerField()
    history_type = serializers.CharField()
    has_dashboard_totals = serializers.BooleanField()
    export_qualities = serializers.ListField(child=serializers.CharField())
    has_monthly_report = serializers.BooleanField()
    has_customer_book = serializers.BooleanField()


class SubscriptionPlanSerializer(serializers.ModelSerializer):
    price_formatted = serializers.CharField(read_only=True)

    class Meta:
        model = SubscriptionPlan
        fields = [
            'id', 'tier', 'name', 'description', 'price', 'price_formatted',
            'billing_period', 'invoice_limit', 'duration', 'features',
            'template_count', 'has_logo', 'has_signature', 'has_custom_colors',
            'history_limit', 'history_type', 'has_dashboard_totals',
            'export_qualities', 'has_monthly_report', 'has_customer_book',
            'is_active', 'is_popular', 'sort_order',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'tier', 'created_at', 'updated_at']


class PaymentTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentTransaction
        fields = [
            'id', 'mayar_invoice_id', 'amount', 'tier', 'status',
            'payment_method', 'payment_url', 'completed_at',
            'verified_at', 'created_at',
        ]
        read_only_fields = fields


class CreatePaymentResponseSerializer(serializers.Serializer):
    record_id = serializers.UUIDField()
    invoice_id = serializers.CharField()
    payment_url = serializers.URLField()
    amount = serializers.IntegerField()


class VerifyPaymentResponseSerializer(serializers.Serializer):
    record_id = serializers.UUIDField()
    status = serializers.CharField()
    tier = serializers.CharField()
    completed_at = serializers.DateTimeField(allow_null=True)
