"""
Backoffice dashboard metrics.
"""

from django.db.models import Count, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import User
from apps.invoices.models import Invoice
from apps.subscriptions.models import PaymentStatus, PaymentTransaction, SubscriptionTier, UserSubscription


def month_start(now=None):
    """Start of the current local month as an aware datetime."""
    local = timezone.localtime(now or timezone.now())
    return local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def get_users_by_tier() -> dict:
    """User count per tier; users without a subscription row count as free."""
    counts = {tier: 0 for tier in SubscriptionTier.values}
    rows = UserSubscription.objects.values('tier').annotate(count=Count('id'))
    for row in rows:
        counts[row['tier']] = row['count']

    counts[SubscriptionTier.FREE] += User.objects.filter(subscription__isnull=True).count()
    return counts


def get_dashboard_metrics() -> dict:
    """
    Headline numbers for the admin dashboard.

    Returns:
        dict: total_users, users_by_tier, total_revenue, monthly_revenue,
        active_subscriptions and total_invoices. Revenue only counts
        completed payments; the month is the current local calendar month.
    """
    now = timezone.now()
    completed = PaymentTransaction.objects.filter(status=PaymentStatus.COMPLETED)

    revenue = completed.aggregate(
        total=Coalesce(Sum('amount'), 0),
        monthly=Coalesce(Sum('amount', filter=Q(completed_at__gte=month_start(now))), 0),
    )

    return {
        'total_users': User.objects.count(),
        'users_by_tier': get_users_by_tier(),
        'total_revenue': revenue['total'],
        'monthly_revenue': revenue['monthly'],
        'active_subscriptions': UserSubscription.objects.filter(
            Q(subscription_end_date__isnull=True) | Q(subscription_end_date__gt=now)
        ).count(),
        'total_invoices': Invoice.objects.count(),
    }


def get_recent_transactions(limit: int = 10):
    return PaymentTransaction.objects.select_related('user').order_by('-created_at')[:limit]
