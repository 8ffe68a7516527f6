import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from apps.invoices.models import Invoice
from apps.subscriptions.models import UserSubscription
from apps.subscriptions.services import get_or_create_subscription


@pytest.fixture
def payload(store):
    return {
        'store_id': str(store.id),
        'invoice_date': '2025-03-07',
        'customer_name': 'Budi Santoso',
        'customer_phone': '081234567890',
        'shipping_cost': '10000.00',
        'items': [
            {'description': 'Cincin emas', 'quantity': 2, 'price': '150000.00'},
            {'description': 'Buyback kalung', 'is_buyback': True, 'gram': '1.5', 'buyback_rate': '900000'},
        ],
    }


# =============================================================================
# CRUD
# =============================================================================

@pytest.mark.django_db
class TestInvoiceCRUD:
    """Tests for invoice endpoints."""

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('invoices:invoice-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create(self, authenticated_client, payload):
        response = authenticated_client.post(reverse('invoices:invoice-list'), payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['invoice_number'] == 'INV-JKT-070325-001'
        assert response.data['subtotal'] == '1650000.00'
        assert response.data['total'] == '1660000.00'
        assert len(response.data['items']) == 2

    def test_create_rejects_bad_item(self, authenticated_client, payload):
        payload['items'][1]['gram'] = '0'

        response = authenticated_client.post(reverse('invoices:invoice-list'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_without_items(self, authenticated_client, payload):
        payload['items'] = []

        response = authenticated_client.post(reverse('invoices:invoice-list'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_limit_reached(self, authenticated_client, user, payload):
        get_or_create_subscription(user=user)
        UserSubscription.objects.filter(user=user).update(current_month_count=10)

        response = authenticated_client.post(reverse('invoices:invoice-list'), payload, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['detail'].code == 'invoice_limit_reached'

    def test_list_paginated(self, authenticated_client, invoice):
        response = authenticated_client.get(reverse('invoices:invoice-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['item_count'] == 2

    def test_list_filter_status(self, authenticated_client, invoice):
        response = authenticated_client.get(reverse('invoices:invoice-list'), {'status': 'draft'})

        assert response.data['count'] == 0

    def test_other_users_invoice_not_found(self, api_client, other_user, invoice):
        refresh = RefreshToken.for_user(other_user)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')

        response = api_client.get(reverse('invoices:invoice-detail', kwargs={'pk': invoice.id}))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_partial_update(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-detail', kwargs={'pk': invoice.id})

        response = authenticated_client.patch(url, {'note': 'Lunas', 'status': 'pending'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['note'] == 'Lunas'
        assert response.data['status'] == 'pending'

    def test_delete(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-detail', kwargs={'pk': invoice.id})

        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Invoice.objects.filter(id=invoice.id).exists()

    def test_upsert(self, authenticated_client, payload):
        url = reverse('invoices:invoice-upsert')
        payload['invoice_number'] = 'INV-CUSTOM-1'

        created = authenticated_client.post(url, payload, format='json')
        payload['customer_name'] = 'Siti'
        updated = authenticated_client.post(url, payload, format='json')

        assert created.status_code == status.HTTP_201_CREATED
        assert updated.status_code == status.HTTP_200_OK
        assert updated.data['id'] == created.data['id']
        assert updated.data['customer_name'] == 'Siti'


# =============================================================================
# Export and helpers
# =============================================================================

@pytest.mark.django_db
class TestInvoiceExportAPI:

    def test_pdf(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-pdf', kwargs={'pk': invoice.id})

        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'application/pdf'
        assert 'Invoice_Budi_07032025.pdf' in response['Content-Disposition']

    def test_jpeg_standard(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-jpeg', kwargs={'pk': invoice.id})

        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'image/jpeg'

    def test_jpeg_print_ready_needs_premium(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-jpeg', kwargs={'pk': invoice.id})

        response = authenticated_client.get(url, {'quality': 'print-ready'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_jpeg_unknown_quality(self, authenticated_client, invoice):
        url = reverse('invoices:invoice-jpeg', kwargs={'pk': invoice.id})

        response = authenticated_client.get(url, {'quality': 'ultra'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_next_sequence(self, authenticated_client, store, invoice):
        url = reverse('invoices:invoice-next-sequence')

        response = authenticated_client.get(url, {'store': str(store.id), 'date': '2025-03-07'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['sequence'] == 2

    def test_next_sequence_requires_store(self, authenticated_client):
        response = authenticated_client.get(reverse('invoices:invoice-next-sequence'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_calculate(self, authenticated_client):
        data = {
            'items': [{'description': 'A', 'quantity': 3, 'price': '1000'}],
            'shipping_cost': '500',
            'tax_enabled': True,
            'tax_percentage': '11',
        }

        response = authenticated_client.post(reverse('invoices:invoice-calculate'), data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'subtotal': '3000.00',
            'shipping_cost': '500.00',
            'tax_amount': '330.00',
            'total': '3830.00',
        }


# =============================================================================
# Reports
# =============================================================================

@pytest.mark.django_db
class TestReportAPI:

    def test_monthly_report_needs_premium(self, authenticated_client):
        response = authenticated_client.get(reverse('invoices:invoice-report-monthly'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['detail'].code == 'premium_required'

    def test_monthly_report_premium(self, authenticated_client, premium_user, invoice):
        response = authenticated_client.get(reverse('invoices:invoice-report-monthly'), {'month': '2025-03'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_invoices'] == 1

    def test_report_months(self, authenticated_client, premium_user, invoice):
        response = authenticated_client.get(reverse('invoices:invoice-report-months'))

        assert response.data == {'months': ['2025-03']}

    def test_revenue(self, authenticated_client, invoice):
        response = authenticated_client.get(reverse('invoices:invoice-report-revenue'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invoice_count'] == 1
        assert response.data['has_dashboard_totals'] is False
