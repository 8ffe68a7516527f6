"""
Invoice reports.

Monthly reports are a premium feature (``has_monthly_report``); revenue
metrics are available to every tier. Months are taken from the invoice date.
"""

import calendar
from collections import OrderedDict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Sum
from django.utils import timezone

from apps.invoices.models import Invoice, InvoiceStatus
from apps.subscriptions.services import can_access_feature, require_feature

from .calculations import ZERO, round_money
from .exceptions import InvalidReportPeriodError

REPORT_MESSAGE = 'Monthly reports require a Premium subscription.'

CUSTOMER_STATUS_KEYS = ('distributor', 'reseller', 'customer')

TOP_CUSTOMERS = 5


def _month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def _previous_month(year: int, month: int) -> tuple:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def _parse_month(month_year: str) -> tuple:
    try:
        year, month = (int(part) for part in month_year.split('-'))
    except (AttributeError, ValueError):
        raise InvalidReportPeriodError(f"Invalid month: {month_year!r}, expected YYYY-MM")
    if not 1 <= month <= 12:
        raise InvalidReportPeriodError(f"Invalid month: {month_year!r}, expected YYYY-MM")
    return year, month


def _month_invoices(user, year: int, month: int):
    last_day = calendar.monthrange(year, month)[1]
    return Invoice.objects.filter(
        user=user,
        invoice_date__gte=date(year, month, 1),
        invoice_date__lte=date(year, month, last_day),
    )


def _percent_change(current, previous) -> float:
    if previous > 0:
        change = (Decimal(current) - Decimal(previous)) / Decimal(previous) * 100
    else:
        change = Decimal(100) if current > 0 else Decimal(0)
    return float(change.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def get_available_report_months(*, user) -> list:
    """Months (YYYY-MM) with invoices, newest first, excluding the current month."""
    require_feature(user=user, feature='has_monthly_report', message=REPORT_MESSAGE)

    current = _month_key(timezone.localdate())
    months = Invoice.objects.filter(user=user).dates('invoice_date', 'month', order='DESC')
    return [_month_key(month) for month in months if _month_key(month) != current]


def generate_monthly_report(*, user, month_year: str = None) -> dict:
    """
    Summary of one month of invoicing.

    Args:
        user: Invoice owner
        month_year: 'YYYY-MM'; defaults to the previous month

    Returns:
        dict with totals, breakdowns by customer status and day, the top
        customers and a trend against the month before (None when that
        month has no invoices)

    Raises:
        FeatureNotAvailable: Without ``has_monthly_report``
        InvalidReportPeriodError: If ``month_year`` is malformed
    """
    require_feature(user=user, feature='has_monthly_report', message=REPORT_MESSAGE)

    if month_year:
        year, month = _parse_month(month_year)
    else:
        today = timezone.localdate()
        year, month = _previous_month(today.year, today.month)

    invoices = list(_month_invoices(user, year, month).order_by('invoice_date', 'created_at'))
    totals = [invoice.total for invoice in invoices]
    total_revenue = sum(totals, ZERO)
    count = len(invoices)

    revenue_by_status = {key: ZERO for key in CUSTOMER_STATUS_KEYS}
    count_by_status = {key: 0 for key in CUSTOMER_STATUS_KEYS}
    daily = OrderedDict()
    customers = {}

    for invoice in invoices:
        status_key = (invoice.customer_status or 'customer').lower()
        if status_key not in revenue_by_status:
            status_key = 'customer'
        revenue_by_status[status_key] += invoice.total
        count_by_status[status_key] += 1

        day = daily.setdefault(invoice.invoice_date.isoformat(), {'count': 0, 'revenue': ZERO})
        day['count'] += 1
        day['revenue'] += invoice.total

        entry = customers.setdefault(invoice.customer_name, {'invoice_count': 0, 'total_revenue': ZERO})
        entry['invoice_count'] += 1
        entry['total_revenue'] += invoice.total

    top_customers = sorted(
        ({'name': name, **data} for name, data in customers.items()),
        key=lambda entry: entry['total_revenue'],
        reverse=True,
    )[:TOP_CUSTOMERS]

    average = (total_revenue / count).quantize(Decimal('1'), rounding=ROUND_HALF_UP) if count else ZERO

    report = {
        'month_year': f"{year:04d}-{month:02d}",
        'month_display': date(year, month, 1).strftime('%B %Y'),
        'total_invoices': count,
        'total_revenue': round_money(total_revenue),
        'average_invoice_value': average,
        'highest_invoice': max(totals) if totals else ZERO,
        'lowest_invoice': min(totals) if totals else ZERO,
        'unique_customers': len({invoice.customer_name.lower() for invoice in invoices}),
        'revenue_by_customer_status': revenue_by_status,
        'invoices_by_customer_status': count_by_status,
        'daily_breakdown': [{'date': day, **data} for day, data in daily.items()],
        'top_customers': top_customers,
        'trend': None,
    }

    previous = _month_invoices(user, *_previous_month(year, month)).aggregate(
        revenue=Sum('total'),
        count=Count('id'),
    )
    if previous['count']:
        revenue_change = _percent_change(total_revenue, previous['revenue'] or ZERO)
        report['trend'] = {
            'revenue_change': revenue_change,
            'invoice_count_change': _percent_change(count, previous['count']),
            'is_positive': revenue_change >= 0,
        }

    return report


def get_revenue_metrics(*, user) -> dict:
    """
    Revenue over all non-draft invoices and over the current month.

    Returns:
        dict with totals, counts and average order values, plus the
        ``has_dashboard_totals`` flag of the user's tier
    """
    invoices = Invoice.objects.filter(user=user).exclude(status=InvoiceStatus.DRAFT)
    today = timezone.localdate()

    overall = invoices.aggregate(revenue=Sum('total'), count=Count('id'))
    monthly = invoices.filter(
        invoice_date__year=today.year,
        invoice_date__month=today.month,
    ).aggregate(revenue=Sum('total'), count=Count('id'))

    total_revenue = overall['revenue'] or ZERO
    monthly_revenue = monthly['revenue'] or ZERO

    return {
        'total_revenue': round_money(total_revenue),
        'monthly_revenue': round_money(monthly_revenue),
        'invoice_count': overall['count'],
        'monthly_invoice_count': monthly['count'],
        'average_order_value': round_money(total_revenue / overall['count']) if overall['count'] else ZERO,
        'monthly_average_order_value': (
            round_money(monthly_revenue / monthly['count']) if monthly['count'] else ZERO
        ),
        'has_dashboard_totals': can_access_feature(user=user, feature='has_dashboard_totals'),
    }

