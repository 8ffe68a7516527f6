from datetime import timedelta

import pytest
from django.utils import timezone

from apps.backoffice.services import (
    BackofficeAnalytics,
    export_invoices_csv,
    export_revenue_csv,
    export_user_growth_csv,
    get_dashboard_metrics,
    get_user_detail,
    list_all_invoices,
    list_stores,
    list_subscriptions,
    list_transactions,
    list_users,
    reset_store_counter,
    resolve_date_range,
    toggle_store_active,
    update_invoice_status,
    update_plan,
    upgrade_user,
    verify_transaction,
    InvalidFilterError,
    RecordNotFoundError,
)
from apps.backoffice.services.analytics import percentage_change, previous_period
from apps.subscriptions.models import PaymentStatus
from apps.subscriptions.services import get_or_create_subscription


# =============================================================================
# Dashboard
# =============================================================================

@pytest.mark.django_db
class TestDashboard:

    def test_metrics(self, admin_user, user, payment, invoice):
        upgrade_user(user_id=user.id)
        get_or_create_subscription(user=admin_user)

        metrics = get_dashboard_metrics()

        assert metrics['total_users'] == 2
        assert metrics['users_by_tier'] == {'free': 1, 'premium': 1}
        assert metrics['total_revenue'] == 1000
        assert metrics['monthly_revenue'] == 1000
        assert metrics['total_invoices'] == 1
        assert metrics['active_subscriptions'] == 2

    def test_users_without_subscription_count_as_free(self, admin_user):
        assert get_dashboard_metrics()['users_by_tier']['free'] == 1

    def test_pending_payments_are_not_revenue(self, payment):
        payment.status = PaymentStatus.PENDING
        payment.save()

        assert get_dashboard_metrics()['total_revenue'] == 0


# =============================================================================
# Users
# =============================================================================

@pytest.mark.django_db
class TestUsers:

    def test_search(self, admin_user, user):
        assert [u.email for u in list_users(search='owner')] == ['owner@example.com']

    def test_filter_by_tier(self, admin_user, user):
        upgrade_user(user_id=user.id)

        assert [u.email for u in list_users(tier='premium')] == ['owner@example.com']
        assert [u.email for u in list_users(tier='free')] == ['admin@example.com']

    def test_invalid_tier(self, user):
        with pytest.raises(InvalidFilterError):
            list(list_users(tier='gold'))

    def test_counts(self, user, invoice):
        listed = list_users().get(id=user.id)

        assert listed.store_count == 1
        assert listed.invoice_count == 1

    def test_detail(self, user, store, payment):
        detail = get_user_detail(user_id=user.id)

        assert detail['stores'] == [store]
        assert detail['recent_transactions'] == [payment]
        assert detail['subscription'].tier == 'free'

    def test_detail_missing(self, db):
        with pytest.raises(RecordNotFoundError):
            get_user_detail(user_id='00000000-0000-0000-0000-000000000000')


# =============================================================================
# Stores and invoices
# =============================================================================

@pytest.mark.django_db
class TestStoresAndInvoices:

    def test_list_stores_with_invoice_count(self, store, invoice):
        listed = list_stores(search='sejahtera').get()

        assert listed.invoice_count == 1

    def test_toggle_active(self, store):
        assert toggle_store_active(store_id=store.id).is_active is False
        assert list_stores(is_active=False).count() == 1
        assert toggle_store_active(store_id=store.id).is_active is True

    def test_reset_store_counter(self, store, invoice):
        store.refresh_from_db()
        assert store.next_invoice_number == 2

        assert reset_store_counter(store_id=store.id).next_invoice_number == 1

    def test_invoice_filters(self, invoice):
        assert list_all_invoices(search='budi').count() == 1
        assert list_all_invoices(status='draft').count() == 0
        assert list_all_invoices(date_from=invoice.invoice_date + timedelta(days=1)).count() == 0

    def test_invalid_invoice_status_filter(self, invoice):
        with pytest.raises(InvalidFilterError):
            list_all_invoices(status='archived')

    def test_update_invoice_status(self, invoice):
        updated = update_invoice_status(invoice_id=invoice.id, status='pending')

        assert updated.status == 'pending'


# =============================================================================
# Billing
# =============================================================================

@pytest.mark.django_db
class TestBilling:

    def test_transactions_filtered(self, payment):
        assert list_transactions(status='completed').count() == 1
        assert list_transactions(status='failed').count() == 0
        assert list_transactions(tier='premium', date_from=timezone.localdate()).count() == 1

    def test_verify_transaction(self, payment):
        assert verify_transaction(transaction_id=payment.id).verified_at is not None

    def test_subscription_states(self, user, admin_user):
        upgrade_user(user_id=user.id)
        expired = get_or_create_subscription(user=admin_user)
        expired.subscription_end_date = timezone.now() - timedelta(days=1)
        expired.save()

        assert [s.user_id for s in list_subscriptions(state='active')] == [user.id]
        assert [s.user_id for s in list_subscriptions(state='expired')] == [admin_user.id]

    def test_update_plan(self, plan):
        updated = update_plan(plan_id=plan.id, price=2000, has_logo=True, tier='free')

        assert updated.price == 2000
        assert updated.has_logo is True
        assert updated.tier == 'premium'


# =============================================================================
# Analytics
# =============================================================================

class TestAnalyticsHelpers:

    def test_previous_period(self):
        start, end = resolve_date_range(
            timezone.localdate() - timedelta(days=9), timezone.localdate(),
        )

        prev_start, prev_end = previous_period(start, end)

        assert prev_end == start - timedelta(days=1)
        assert (prev_end - prev_start) == (end - start)

    def test_percentage_change(self):
        assert percentage_change(150, 100) == 50.0
        assert percentage_change(100, 0) == 100.0
        assert percentage_change(0, 0) == 0.0

    def test_invalid_range(self):
        with pytest.raises(InvalidFilterError):
            resolve_date_range(timezone.localdate(), timezone.localdate() - timedelta(days=1))


@pytest.mark.django_db
class TestAnalytics:

    def test_revenue(self, payment):
        start, end = resolve_date_range()

        stats = BackofficeAnalytics.revenue(start, end)

        assert stats['total_revenue'] == 1000
        assert stats['transaction_count'] == 1
        assert stats['average_transaction_value'] == 1000
        assert stats['percentage_change'] == 100.0
        assert len(stats['daily_revenue']) == 31
        assert stats['daily_revenue'][-1] == {'date': end.isoformat(), 'value': 1000}
        assert stats['revenue_by_tier'] == [{'tier': 'premium', 'amount': 1000, 'count': 1}]

    def test_users(self, admin_user, user):
        start, end = resolve_date_range()

        stats = BackofficeAnalytics.users(start, end)

        assert stats['total_users'] == 2
        assert stats['new_users'] == 2
        assert stats['daily_registrations'][-1]['value'] == 2

    def test_invoices(self, user, invoice):
        start, end = resolve_date_range()

        stats = BackofficeAnalytics.invoices(start, end)

        assert stats['total_invoices'] == 1
        assert stats['invoices_by_status'] == [{'status': 'synced', 'count': 1}]
        assert stats['top_users'] == [{'user_email': 'owner@example.com', 'count': 1}]
        assert stats['average_invoices_per_user'] == 1.0

    def test_csv_exports(self, user, payment, invoice):
        start, end = resolve_date_range()

        revenue, revenue_rows = export_revenue_csv(start, end)
        growth, growth_rows = export_user_growth_csv(start, end)
        invoices, invoice_rows = export_invoices_csv(start, end)

        assert revenue.splitlines() == ['date,amount,tier,payment_method', f'{end.isoformat()},1000,premium,qris']
        assert revenue_rows == 1
        assert growth.splitlines()[1] == f'{end.isoformat()},1,free'
        assert growth_rows == 1
        assert invoices.splitlines()[0] == 'date,invoice_number,customer,total,status'
        assert invoice_rows == 1
