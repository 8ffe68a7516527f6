from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.invoices.services import (
    create_invoice_with_items,
    generate_monthly_report,
    get_available_report_months,
    get_revenue_metrics,
    InvalidReportPeriodError,
)
from apps.subscriptions.exceptions import FeatureNotAvailable


def _invoice(user, invoice_date, amount, name='Budi', customer_status=None, status=None):
    data = {'customer_name': name, 'invoice_date': invoice_date}
    if customer_status:
        data['customer_status'] = customer_status
    if status:
        data['status'] = status
    return create_invoice_with_items(
        user=user,
        data=data,
        items=[{'description': 'Item', 'quantity': 1, 'price': Decimal(amount)}],
    )


@pytest.fixture
def february(premium_user):
    _invoice(premium_user, date(2025, 2, 3), 100000, 'Budi', 'Reseller')
    _invoice(premium_user, date(2025, 2, 3), 50000, 'budi')
    _invoice(premium_user, date(2025, 2, 10), 250000, 'Ani', 'Distributor')
    _invoice(premium_user, date(2025, 1, 15), 200000, 'Citra')
    return premium_user


@pytest.mark.django_db
class TestMonthlyReport:
    """Tests for the premium monthly report."""

    def test_summary(self, february):
        report = generate_monthly_report(user=february, month_year='2025-02')

        assert report['month_display'] == 'February 2025'
        assert report['total_invoices'] == 3
        assert report['total_revenue'] == Decimal('400000.00')
        assert report['average_invoice_value'] == Decimal('133333')
        assert report['highest_invoice'] == Decimal('250000.00')
        assert report['lowest_invoice'] == Decimal('50000.00')
        assert report['unique_customers'] == 2

    def test_breakdowns(self, february):
        report = generate_monthly_report(user=february, month_year='2025-02')

        assert report['revenue_by_customer_status'] == {
            'distributor': Decimal('250000.00'),
            'reseller': Decimal('100000.00'),
            'customer': Decimal('50000.00'),
        }
        assert report['invoices_by_customer_status'] == {'distributor': 1, 'reseller': 1, 'customer': 1}
        assert report['daily_breakdown'] == [
            {'date': '2025-02-03', 'count': 2, 'revenue': Decimal('150000.00')},
            {'date': '2025-02-10', 'count': 1, 'revenue': Decimal('250000.00')},
        ]
        assert report['top_customers'][0]['name'] == 'Ani'

    def test_trend_against_previous_month(self, february):
        trend = generate_monthly_report(user=february, month_year='2025-02')['trend']

        assert trend == {'revenue_change': 100.0, 'invoice_count_change': 200.0, 'is_positive': True}

    def test_no_trend_without_previous_month(self, february):
        assert generate_monthly_report(user=february, month_year='2025-01')['trend'] is None

    def test_invalid_month(self, premium_user):
        with pytest.raises(InvalidReportPeriodError):
            generate_monthly_report(user=premium_user, month_year='2025-13')

    def test_free_user_rejected(self, user):
        with pytest.raises(FeatureNotAvailable):
            generate_monthly_report(user=user)

    def test_available_months_skip_current(self, february):
        _invoice(february, timezone.localdate(), 1000)

        assert get_available_report_months(user=february) == ['2025-02', '2025-01']


@pytest.mark.django_db
class TestRevenueMetrics:

    def test_metrics_skip_drafts(self, user):
        today = timezone.localdate()
        _invoice(user, today, 1000)
        _invoice(user, today, 500, status='draft')
        _invoice(user, today - timedelta(days=400), 3000)

        metrics = get_revenue_metrics(user=user)

        assert metrics['total_revenue'] == Decimal('4000.00')
        assert metrics['invoice_count'] == 2
        assert metrics['monthly_revenue'] == Decimal('1000.00')
        assert metrics['monthly_invoice_count'] == 1
        assert metrics['average_order_value'] == Decimal('2000.00')
        assert metrics['has_dashboard_totals'] is False
