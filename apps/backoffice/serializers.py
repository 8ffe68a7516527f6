from rest_framework import serializers

from apps.accounts.models import User
from apps.invoices.models import Invoice, InvoiceStatus
from apps.invoices.serializers import InvoiceSerializer
from apps.stores.models import Store
from apps.stores.serializers import StoreContactSerializer
from apps.subscriptions.models import SubscriptionTier, UserSubscription
from apps.subscriptions.serializers import PaymentTransactionSerializer


# =============================================================================
# Input Serializers
# =============================================================================

class DateRangeQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)


class UpgradeInputSerializer(serializers.Serializer):
    tier = serializers.ChoiceField(choices=[SubscriptionTier.PREMIUM], default=SubscriptionTier.PREMIUM)


class ExtendInputSerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=1, max_value=3650)


class InvoiceStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=InvoiceStatus.choices)


# =============================================================================
# Output Serializers
# =============================================================================

class AdminUserSerializer(serializers.ModelSerializer):
    tier = serializers.SerializerMethodField()
    store_count = serializers.IntegerField(read_only=True)
    invoice_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'display_name', 'is_active', 'is_staff', 'tier',
            'store_count', 'invoice_count', 'created_at', 'last_login',
        ]
        read_only_fields = fields

    def get_tier(self, obj):
        subscription = getattr(obj, 'subscription', None)
        return subscription.tier if subscription is not None else SubscriptionTier.FREE


class AdminSubscriptionSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True)
    is_expired = serializers.SerializerMethodField()

    class Meta:
        model = UserSubscription
        fields = [
            'id', 'user', 'user_email', 'tier', 'invoice_limit', 'current_month_count',
            'month_year', 'subscription_start_date', 'subscription_end_date',
            'is_expired', 'updated_at',
        ]
        read_only_fields = fields

    def get_is_expired(self, obj):
        return obj.is_expired()


class AdminTransactionSerializer(PaymentTransactionSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True)

    class Meta(PaymentTransactionSerializer.Meta):
        fields = PaymentTransactionSerializer.Meta.fields + ['user', 'user_email', 'webhook_verified_at']
        read_only_fields = fields


class AdminStoreSerializer(serializers.ModelSerializer):
    owner_email = serializers.EmailField(source='user.email', read_only=True)
    invoice_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Store
        fields = [
            'id', 'name', 'slug', 'is_active', 'user', 'owner_email', 'invoice_count',
            'invoice_prefix', 'store_code', 'next_invoice_number', 'created_at',
        ]
        read_only_fields = fields


class AdminStoreDetailSerializer(AdminStoreSerializer):
    contacts = StoreContactSerializer(many=True, read_only=True)

    class Meta(AdminStoreSerializer.Meta):
        fields = AdminStoreSerializer.Meta.fields + [
            'address', 'whatsapp', 'email', 'brand_color', 'tagline',
            'reset_counter_daily', 'daily_invoice_date', 'daily_invoice_counter',
            'contacts', 'updated_at',
        ]
        read_only_fields = fields


class AdminInvoiceListSerializer(serializers.ModelSerializer):
    owner_email = serializers.EmailField(source='user.email', read_only=True)
    store_name = serializers.CharField(source='store.name', read_only=True, default=None)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'invoice_date', 'customer_name', 'total',
            'status', 'user', 'owner_email', 'store_name', 'created_at',
        ]
        read_only_fields = fields


class AdminInvoiceDetailSerializer(InvoiceSerializer):
    owner_email = serializers.EmailField(source='user.email', read_only=True)

    class Meta(InvoiceSerializer.Meta):
        fields = InvoiceSerializer.Meta.fields + ['user', 'owner_email']
        read_only_fields = fields


class UserDetailSerializer(serializers.Serializer):
    user = AdminUserSerializer()
    subscription = AdminSubscriptionSerializer()
    stores = AdminStoreSerializer(many=True)
    recent_transactions = PaymentTransactionSerializer(many=True)


class DashboardMetricsSerializer(serializers.Serializer):
    total_users = serializers.IntegerField()
    users_by_tier = serializers.DictField(child=serializers.IntegerField())
    total_revenue = serializers.IntegerField()
    monthly_revenue = serializers.IntegerField()
    active_subscriptions = serializers.IntegerField()
    total_invoices = serializers.IntegerField()


class DashboardResponseSerializer(serializers.Serializer):
    metrics = DashboardMetricsSerializer()
    recent_transactions = AdminTransactionSerializer(many=True)
