import pytest
from django.urls import reverse
from rest_framework import status

from apps.invoices.models import Invoice
from apps.subscriptions.services import get_or_create_subscription


# =============================================================================
# Access
# =============================================================================

@pytest.mark.django_db
class TestBackofficeAccess:

    def test_anonymous_rejected(self, api_client):
        response = api_client.get(reverse('backoffice:dashboard'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_non_staff_forbidden(self, owner_client):
        response = owner_client.get(reverse('backoffice:dashboard'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_dashboard(self, admin_client, payment):
        response = admin_client.get(reverse('backoffice:dashboard'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['metrics']['total_revenue'] == 1000
        assert response.data['recent_transactions'][0]['user_email'] == 'owner@example.com'


# =============================================================================
# Users
# =============================================================================

@pytest.mark.django_db
class TestUserAdminAPI:

    def test_list_paginated(self, admin_client, user):
        response = admin_client.get(reverse('backoffice:user-list'), {'search': 'owner'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['tier'] == 'free'

    def test_list_invalid_tier(self, admin_client):
        response = admin_client.get(reverse('backoffice:user-list'), {'tier': 'gold'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_detail(self, admin_client, user, store):
        response = admin_client.get(reverse('backoffice:user-detail', kwargs={'pk': user.id}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == 'owner@example.com'
        assert response.data['stores'][0]['name'] == 'Toko Emas Sejahtera'

    def test_upgrade_and_downgrade(self, admin_client, user):
        upgraded = admin_client.post(reverse('backoffice:user-upgrade', kwargs={'pk': user.id}))
        downgraded = admin_client.post(reverse('backoffice:user-downgrade', kwargs={'pk': user.id}))

        assert upgraded.status_code == status.HTTP_200_OK
        assert upgraded.data['tier'] == 'premium'
        assert upgraded.data['invoice_limit'] == 200
        assert downgraded.data['tier'] == 'free'
        assert downgraded.data['subscription_end_date'] is None

    def test_extend(self, admin_client, user):
        response = admin_client.post(
            reverse('backoffice:user-extend', kwargs={'pk': user.id}),
            {'days': 7},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['subscription_end_date'] is not None

    def test_extend_requires_positive_days(self, admin_client, user):
        response = admin_client.post(
            reverse('backoffice:user-extend', kwargs={'pk': user.id}),
            {'days': 0},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reset_counter(self, admin_client, user):
        subscription = get_or_create_subscription(user=user)
        subscription.current_month_count = 5
        subscription.save()

        response = admin_client.post(reverse('backoffice:user-reset-counter', kwargs={'pk': user.id}))

        assert response.data['current_month_count'] == 0

    def test_unknown_user(self, admin_client):
        url = reverse('backoffice:user-downgrade', kwargs={'pk': '00000000-0000-0000-0000-000000000000'})

        response = admin_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Stores and invoices
# =============================================================================

@pytest.mark.django_db
class TestStoreInvoiceAdminAPI:

    def test_store_list(self, admin_client, store, invoice):
        response = admin_client.get(reverse('backoffice:store-list'), {'is_active': 'true'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['owner_email'] == 'owner@example.com'
        assert response.data['results'][0]['invoice_count'] == 1

    def test_store_toggle(self, admin_client, store):
        response = admin_client.post(reverse('backoffice:store-toggle-active', kwargs={'pk': store.id}))

        assert response.data['is_active'] is False

    def test_invoice_detail_and_delete(self, admin_client, invoice):
        url = reverse('backoffice:invoice-detail', kwargs={'pk': invoice.id})

        detail = admin_client.get(url)
        deleted = admin_client.delete(url)

        assert detail.data['owner_email'] == 'owner@example.com'
        assert len(detail.data['items']) == 1
        assert deleted.status_code == status.HTTP_204_NO_CONTENT
        assert not Invoice.objects.filter(id=invoice.id).exists()

    def test_invoice_status(self, admin_client, invoice):
        response = admin_client.post(
            reverse('backoffice:invoice-status', kwargs={'pk': invoice.id}),
            {'status': 'draft'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'draft'

    def test_invoice_list_filters(self, admin_client, invoice, user):
        response = admin_client.get(reverse('backoffice:invoice-list'), {'user': str(user.id)})

        assert response.data['count'] == 1


# =============================================================================
# Billing and analytics
# =============================================================================

@pytest.mark.django_db
class TestBillingAnalyticsAPI:

    def test_transaction_verify(self, admin_client, payment):
        response = admin_client.post(reverse('backoffice:transaction-verify', kwargs={'pk': payment.id}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['verified_at'] is not None

    def test_subscription_list(self, admin_client, user):
        get_or_create_subscription(user=user)

        response = admin_client.get(reverse('backoffice:subscription-list'), {'state': 'active'})

        assert response.data['count'] == 1

    def test_plan_update(self, admin_client, plan):
        response = admin_client.patch(
            reverse('backoffice:plan-detail', kwargs={'pk': plan.id}),
            {'price': 1500, 'is_popular': True},
            format='json'
        )
        listed = admin_client.get(reverse('backoffice:plan-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['price'] == 1500
        assert listed.data[0]['is_popular'] is True

    def test_revenue_analytics(self, admin_client, payment):
        response = admin_client.get(reverse('backoffice:analytics-revenue'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_revenue'] == 1000

    def test_invalid_range(self, admin_client):
        response = admin_client.get(
            reverse('backoffice:analytics-users'),
            {'date_from': '2025-03-10', 'date_to': '2025-03-01'}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_csv_export(self, admin_client, payment):
        url = reverse('backoffice:analytics-export', kwargs={'report': 'revenue'})

        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'].startswith('text/csv')
        assert response.content.decode().startswith('date,amount,tier,payment_method')

    def test_unknown_export(self, admin_client):
        url = reverse('backoffice:analytics-export', kwargs={'report': 'unknown'})

        response = admin_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
