"""
Backoffice Analytics
====================

Aggregates payments, users and invoices over a date range for the admin
analytics pages, and renders the same data as CSV downloads.

Classes:
    BackofficeAnalytics: Static methods for revenue, user and invoice analytics.

Example:
    Revenue of the last 30 days::

        from apps.backoffice.services import BackofficeAnalytics, resolve_date_range

        start, end = resolve_date_range()
        stats = BackofficeAnalytics.revenue(start, end)
        print(stats['total_revenue'], stats['percentage_change'])

Note:
    Ranges are inclusive calendar days in the project timezone. Every series
    has one point per day of the range, including days without data.
"""

import csv
import io
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Sum
from django.db.models.functions import Coalesce, TruncDate
from django.utils import timezone

from apps.accounts.models import User
from apps.invoices.models import Invoice
from apps.subscriptions.models import PaymentStatus, PaymentTransaction, SubscriptionTier, UserSubscription

from .dashboard import get_users_by_tier
from .exceptions import InvalidFilterError

DEFAULT_RANGE_DAYS = 30
TOP_USERS = 10


def resolve_date_range(date_from: date = None, date_to: date = None) -> tuple:
    """
    ``(start, end)`` with the last 30 days as default.

    Raises:
        InvalidFilterError: If the start is after the end
    """
    end = date_to or timezone.localdate()
    start = date_from or end - timedelta(days=DEFAULT_RANGE_DAYS)
    if start > end:
        raise InvalidFilterError("date_from must not be after date_to")
    return start, end


def previous_period(start: date, end: date) -> tuple:
    """The range of the same length ending the day before ``start``."""
    prev_end = start - timedelta(days=1)
    return prev_end - (end - start), prev_end


def percentage_change(current, previous) -> float:
    if not previous:
        return 100.0 if current > 0 else 0.0
    return round(float((current - previous) / previous) * 100, 2)


def _rate(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def _round_whole(value) -> Decimal:
    return Decimal(value or 0).quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def _daily_series(queryset, field: str, start: date, end: date, value=None) -> list:
    """
    One ``{'date', 'value'}`` point per day, zero-filled.

    ``value`` is an aggregate expression; rows are counted when omitted.
    """
    rows = (
        queryset
        .annotate(day=TruncDate(field))
        .values('day')
        .annotate(value=value if value is not None else Count('pk'))
        .order_by('day')
    )
    by_day = {row['day']: row['value'] for row in rows}

    series = []
    day = start
    while day <= end:
        series.append({'date': day.isoformat(), 'value': by_day.get(day, 0)})
        day += timedelta(days=1)
    return series


def _completed_payments(start: date, end: date):
    return PaymentTransaction.objects.filter(
        status=PaymentStatus.COMPLETED,
        created_at__date__gte=start,
        created_at__date__lte=end,
    )


def _users_in_range(start: date, end: date):
    return User.objects.filter(created_at__date__gte=start, created_at__date__lte=end)


def _invoices_in_range(start: date, end: date):
    return Invoice.objects.filter(created_at__date__gte=start, created_at__date__lte=end)


class BackofficeAnalytics:
    """
    Read-only analytics queries for the backoffice.

    All methods return plain dictionaries, ready for JSON serialization.
    """

    @staticmethod
    def revenue(start: date, end: date) -> dict:
        """
        Completed-payment revenue for a range.

        Returns:
            dict: A dictionary containing:
                - total_revenue (int): Sum of completed payments.
                - transaction_count (int): Number of completed payments.
                - average_transaction_value (int): Rounded mean payment.
                - previous_period_revenue (int): Revenue of the preceding
                  range of equal length.
                - percentage_change (float): Change against that range.
                - daily_revenue (list): ``{'date', 'value'}`` per day.
                - revenue_by_tier (list): ``{'tier', 'amount', 'count'}``,
                  highest amount first.
        """
        payments = _completed_payments(start, end)
        totals = payments.aggregate(total=Coalesce(Sum('amount'), 0), count=Count('id'))
        previous = _completed_payments(*previous_period(start, end)).aggregate(
            total=Coalesce(Sum('amount'), 0),
        )['total']

        by_tier = (
            payments.values('tier')
            .annotate(amount=Sum('amount'), count=Count('id'))
            .order_by('-amount')
        )

        return {
            'period_start': start,
            'period_end': end,
            'total_revenue': totals['total'],
            'transaction_count': totals['count'],
            'average_transaction_value': int(_round_whole(
                Decimal(totals['total']) / totals['count'] if totals['count'] else 0
            )),
            'previous_period_revenue': previous,
            'percentage_change': percentage_change(totals['total'], previous),
            'daily_revenue': _daily_series(payments, 'created_at', start, end, Sum('amount')),
            'revenue_by_tier': [
                {'tier': row['tier'], 'amount': row['amount'], 'count': row['count']}
                for row in by_tier
            ],
        }

    @staticmethod
    def users(start: date, end: date) -> dict:
        """
        Signups and tier distribution.

        Conversion is the share of free users who completed a premium
        payment in the range; churn is the share of premium subscriptions
        whose end date has passed.
        """
        now = timezone.now()
        new_users = _users_in_range(start, end)
        by_tier = get_users_by_tier()

        premium = UserSubscription.objects.filter(tier=SubscriptionTier.PREMIUM)
        premium_total = premium.count()
        expired = premium.filter(subscription_end_date__lte=now).count()

        upgraded = (
            _completed_payments(start, end)
            .filter(tier=SubscriptionTier.PREMIUM)
            .values('user_id')
            .distinct()
            .count()
        )

        return {
            'period_start': start,
            'period_end': end,
            'total_users': User.objects.count(),
            'new_users': new_users.count(),
            'active_premium_users': premium_total - expired,
            'conversion_rate': _rate(upgraded, by_tier[SubscriptionTier.FREE] + upgraded),
            'churn_rate': _rate(expired, premium_total),
            'users_by_tier': sorted(
                ({'tier': tier, 'count': count} for tier, count in by_tier.items()),
                key=lambda row: row['count'],
                reverse=True,
            ),
            'daily_registrations': _daily_series(new_users, 'created_at', start, end),
        }

    @staticmethod
    def invoices(start: date, end: date) -> dict:
        """Invoices created in the range, by status, per day and per top user."""
        invoices = _invoices_in_range(start, end)
        totals = invoices.aggregate(
            count=Count('id'),
            value=Coalesce(Sum('total'), Decimal('0')),
            users=Count('user', distinct=True),
        )

        by_status = invoices.values('status').annotate(count=Count('id')).order_by('-count')
        top_users = (
            invoices.values('user__email')
            .annotate(count=Count('id'))
            .order_by('-count', 'user__email')[:TOP_USERS]
        )

        return {
            'period_start': start,
            'period_end': end,
            'total_invoices': totals['count'],
            'total_invoice_value': totals['value'],
            'average_invoice_value': _round_whole(
                totals['value'] / totals['count'] if totals['count'] else 0
            ),
            'average_invoices_per_user': round(totals['count'] / totals['users'], 2) if totals['users'] else 0.0,
            'invoices_by_status': [
                {'status': row['status'], 'count': row['count']} for row in by_status
            ],
            'daily_invoices': _daily_series(invoices, 'created_at', start, end),
            'top_users': [
                {'user_email': row['user__email'], 'count': row['count']} for row in top_users
            ],
        }


# =============================================================================
# CSV exports
# =============================================================================

def _to_csv(headers: list, rows: list) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def _local_day(value) -> str:
    return timezone.localtime(value).date().isoformat()


def export_revenue_csv(start: date, end: date) -> tuple:
    """Completed payments in the range. Returns ``(csv_text, row_count)``."""
    payments = _completed_payments(start, end).order_by('created_at')
    rows = [
        [_local_day(payment.created_at), payment.amount, payment.tier, payment.payment_method or '']
        for payment in payments
    ]
    return _to_csv(['date', 'amount', 'tier', 'payment_method'], rows), len(rows)


def export_user_growth_csv(start: date, end: date) -> tuple:
    """One row per signup in the range with the user's current tier."""
    users = _users_in_range(start, end).select_related('subscription').order_by('created_at')
    rows = []
    for user in users:
        subscription = getattr(user, 'subscription', None)
        tier = subscription.tier if subscription is not None else SubscriptionTier.FREE
        rows.append([_local_day(user.created_at), 1, tier])
    return _to_csv(['date', 'new_users', 'tier'], rows), len(rows)


def export_invoices_csv(start: date, end: date) -> tuple:
    invoices = _invoices_in_range(start, end).order_by('created_at')
    rows = [
        [_local_day(invoice.created_at), invoice.invoice_number, invoice.customer_name,
         invoice.total, invoice.status]
        for invoice in invoices
    ]
    return _to_csv(['date', 'invoice_number', 'customer', 'total', 'status'], rows), len(rows)
