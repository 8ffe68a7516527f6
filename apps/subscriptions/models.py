# apps/subscriptions/models.py

from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
import uuid


class SubscriptionTier(models.TextChoices):
    FREE = 'free', 'Free'
    PREMIUM = 'premium', 'Premium'


class HistoryType(models.TextChoices):
    COUNT = 'count', 'Most recent N invoices'
    DAYS = 'days', 'Invoices from the last N days'


class BillingPeriod(models.TextChoices):
    MONTHLY = 'monthly', 'Monthly'
    YEARLY = 'yearly', 'Yearly'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'
    EXPIRED = 'expired', 'Expired'


class SubscriptionPlan(models.Model):
    """
    Admin-editable pricing and feature matrix for one tier.

    When no active plan row exists for a tier the defaults in
    ``apps.subscriptions.pricing`` apply.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tier = models.CharField(max_length=20, choices=SubscriptionTier.choices, unique=True)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    price = models.PositiveIntegerField(default=0)
    billing_period = models.CharField(
        max_length=10,
        choices=BillingPeriod.choices,
        default=BillingPeriod.MONTHLY
    )
    invoice_limit = models.PositiveIntegerField(default=10)
    duration = models.PositiveIntegerField(default=30, help_text='Days; 0 means forever')
    features = models.JSONField(default=list, blank=True)

    # Feature columns
    template_count = models.PositiveIntegerField(default=1)
    has_logo = models.BooleanField(default=False)
    has_signature = models.BooleanField(default=False)
    has_custom_colors = models.BooleanField(default=False)
    history_limit = models.PositiveIntegerField(default=10)
    history_type = models.CharField(
        max_length=10,
        choices=HistoryType.choices,
        default=HistoryType.COUNT
    )
    has_dashboard_totals = models.BooleanField(default=False)
    export_qualities = models.JSONField(default=list, blank=True)
    has_monthly_report = models.BooleanField(default=False)
    has_customer_book = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)
    is_popular = models.BooleanField(default=False)
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subscription_plans'
        ordering = ['sort_order', 'price']

    def __str__(self):
        return f"{self.name} ({self.tier})"

    @property
    def price_formatted(self):
        from .pricing import format_price
        return format_price(self.price)

    def tier_features(self):
        """Feature dict in the same shape as ``pricing.TIER_FEATURES``."""
        return {
            'invoice_limit': self.invoice_limit,
            'template_count': self.template_count,
            'has_logo': self.has_logo,
            'has_signature': self.has_signature,
            'has_custom_colors': self.has_custom_colors,
            'history_limit': self.history_limit,
            'history_type': self.history_type,
            'has_dashboard_totals': self.has_dashboard_totals,
            'export_qualities': list(self.export_qualities or []),
            'has_monthly_report': self.has_monthly_report,
            'has_customer_book': self.has_customer_book,
        }


class UserSubscription(models.Model):
    """Current tier and monthly invoice counter of one user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='subscription'
    )
    tier = models.CharField(
        max_length=20,
        choices=SubscriptionTier.choices,
        default=SubscriptionTier.FREE
    )
    invoice_limit = models.PositiveIntegerField(default=10)
    current_month_count = models.PositiveIntegerField(default=0)
    # Billing cycle id, "YYYY-MM-DD"
    month_year = models.CharField(max_length=10)
    subscription_start_date = models.DateTimeField(default=timezone.now)
    subscription_end_date = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_subscriptions'
        indexes = [
            models.Index(fields=['tier'], name='user_subs_tier_idx'),
        ]

    def __str__(self):
        return f"{self.user} - {self.tier}"

    def is_expired(self, now=None):
        if self.subscription_end_date is None:
            return False
        return self.subscription_end_date <= (now or timezone.now())


class InvoiceUsage(models.Model):
    """Invoice counter per user and billing cycle."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='invoice_usage'
    )
    month_year = models.CharField(max_length=10)
    invoice_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoice_usage'
        unique_together = [['user', 'month_year']]
        ordering = ['-month_year']

    def __str__(self):
        return f"{self.user} {self.month_year}: {self.invoice_count}"


class PaymentTransaction(models.Model):
    """Checkout created at the payment provider for a tier upgrade."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='payment_transactions'
    )
    # Provider transaction id; webhooks reference this one
    mayar_invoice_id = models.CharField(max_length=255, unique=True)
    mayar_transaction_id = models.CharField(max_length=255, blank=True, null=True)
    amount = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    tier = models.CharField(max_length=20, choices=SubscriptionTier.choices)
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    payment_method = models.CharField(max_length=50, blank=True, null=True)
    payment_url = models.URLField(max_length=500, blank=True)

    completed_at = models.DateTimeField(null=True, blank=True)
    webhook_verified_at = models.DateTimeField(null=True, blank=True)
    # Manual confirmation by an admin
    verified_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payment_transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'status'], name='payments_user_status_idx'),
            models.Index(fields=['created_at'], name='payments_created_idx'),
        ]

    def __str__(self):
        return f"{self.tier} {self.amount} ({self.status})"

    def mark_completed(self, payment_method=None):
        now = timezone.now()
        self.status = PaymentStatus.COMPLETED
        self.completed_at = now
        self.webhook_verified_at = now
        update_fields = ['status', 'completed_at', 'webhook_verified_at', 'updated_at']
        if payment_method:
            self.payment_method = payment_method
            update_fields.append('payment_method')
        self.save(update_fields=update_fields)

    def mark_failed(self):
        self.status = PaymentStatus.FAILED
        self.webhook_verified_at = timezone.now()
        self.save(update_fields=['status', 'webhook_verified_at', 'updated_at'])
