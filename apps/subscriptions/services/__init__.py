"""
Subscriptions app services layer.

Tier gating, monthly invoice quota and Mayar payments. State-changing
operations run in transactions and lock the subscription or payment row.
"""

from .exceptions import (
    SubscriptionsServiceError,
    InvalidTierError,
    UnknownFeatureError,
    InvalidExtensionError,
    PaymentError,
    PaymentConfigurationError,
    PaymentProviderError,
    PaymentNotFoundError,
    InvalidWebhookPayload,
)

from .tiers import (
    get_active_plan,
    get_tier_features,
    get_user_tier,
    get_user_features,
    is_premium,
    can_access_feature,
    require_feature,
    get_history_limit,
    get_export_qualities,
)

from .subscription_management import (
    get_billing_cycle_id,
    get_next_reset_date,
    get_or_create_subscription,
    upgrade_to_tier,
    downgrade_to_free,
    extend_subscription,
    reset_invoice_counter,
    can_generate_invoice,
    get_remaining_invoices,
    check_invoice_limit,
    increment_invoice_count,
    get_subscription_status,
)

from .usage_tracking import (
    get_usage,
    increment_usage,
    get_usage_history,
)

from .mayar_client import MayarClient

from .payments import (
    get_tier_amount,
    create_payment,
    verify_webhook_signature,
    handle_payment_success,
    handle_payment_failed,
    process_webhook,
    get_user_payment,
    verify_payment,
    lookup_payment,
    list_user_payments,
    payment_qr_png,
)


__all__ = [
    # Exceptions
    'SubscriptionsServiceError',
    'InvalidTierError',
    'UnknownFeatureError',
    'InvalidExtensionError',
    'PaymentError',
    'PaymentConfigurationError',
    'PaymentProviderError',
    'PaymentNotFoundError',
    'InvalidWebhookPayload',

    # Tiers
    'get_active_plan',
    'get_tier_features',
    'get_user_tier',
    'get_user_features',
    'is_premium',
    'can_access_feature',
    'require_feature',
    'get_history_limit',
    'get_export_qualities',

    # Subscription Management
    'get_billing_cycle_id',
    'get_next_reset_date',
    'get_or_create_subscription',
    'upgrade_to_tier',
    'downgrade_to_free',
    'extend_subscription',
    'reset_invoice_counter',
    'can_generate_invoice',
    'get_remaining_invoices',
    'check_invoice_limit',
    'increment_invoice_count',
    'get_subscription_status',

    # Usage Tracking
    'get_usage',
    'increment_usage',
    'get_usage_history',

    # Payments
    'MayarClient',
    'get_tier_amount',
    'create_payment',
    'verify_webhook_signature',
    'handle_payment_success',
    'handle_payment_failed',
    'process_webhook',
    'get_user_payment',
    'verify_payment',
    'lookup_payment',
    'list_user_payments',
    'payment_qr_png',
]
