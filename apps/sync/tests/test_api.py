import pytest
from django.urls import reverse
from rest_framework import status

from apps.invoices.models import Invoice
from apps.sync.services import enqueue, get_count, sync_service


# =============================================================================
# Queue
# =============================================================================

@pytest.mark.django_db
class TestQueueAPI:
    """Tests for the sync queue endpoints."""

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('sync:queue'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_enqueue_and_list(self, authenticated_client, invoice_data, invoice_id):
        created = authenticated_client.post(reverse('sync:queue'), {
            'action': 'create',
            'entity_type': 'invoice',
            'entity_id': invoice_id,
            'data': invoice_data,
        }, format='json')
        listed = authenticated_client.get(reverse('sync:queue'))

        assert created.status_code == status.HTTP_201_CREATED
        assert created.data['retry_count'] == 0
        assert len(listed.data) == 1
        assert listed.data[0]['entity_id'] == invoice_id

    def test_enqueue_invalid_action(self, authenticated_client):
        response = authenticated_client.post(reverse('sync:queue'), {
            'action': 'merge',
            'entity_type': 'invoice',
            'entity_id': 'abc',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_clear(self, authenticated_client, user):
        enqueue(user=user, action='create', entity_type='invoice', entity_id='a')
        enqueue(user=user, action='create', entity_type='invoice', entity_id='b')

        response = authenticated_client.delete(reverse('sync:queue'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['removed'] == 2

    def test_remove_item(self, authenticated_client, user):
        item = enqueue(user=user, action='create', entity_type='invoice', entity_id='a')

        response = authenticated_client.delete(reverse('sync:queue-item', kwargs={'pk': item.id}))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert get_count(user=user) == 0

    def test_remove_other_users_item(self, authenticated_client, other_user):
        item = enqueue(user=other_user, action='create', entity_type='invoice', entity_id='a')

        response = authenticated_client.delete(reverse('sync:queue-item', kwargs={'pk': item.id}))

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Replay
# =============================================================================

@pytest.mark.django_db
class TestReplayAPI:

    def test_run(self, authenticated_client, user, store, invoice_data, invoice_id):
        enqueue(user=user, action='create', entity_type='invoice', entity_id=invoice_id, data=invoice_data)

        response = authenticated_client.post(reverse('sync:run'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['succeeded'] == 1
        assert Invoice.objects.filter(id=invoice_id, user=user).exists()

    def test_status(self, authenticated_client, user):
        enqueue(user=user, action='create', entity_type='invoice', entity_id='a')

        response = authenticated_client.get(reverse('sync:status'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['queue_count'] == 1
        assert response.data['is_syncing'] is False

    def test_push_reports_each_item(self, authenticated_client, user, invoice_data, invoice_id):
        response = authenticated_client.post(reverse('sync:push'), {
            'items': [
                {'action': 'upsert', 'entity_type': 'settings', 'entity_id': 'settings',
                 'data': {'name': 'Toko Mulia', 'admin_name': 'Siti'}},
                {'action': 'create', 'entity_type': 'invoice', 'entity_id': 'bad-id',
                 'data': invoice_data},
                {'action': 'create', 'entity_type': 'invoice', 'entity_id': invoice_id,
                 'data': invoice_data},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        results = response.data['results']
        assert [result['success'] for result in results] == [True, False, True]
        assert 'Invalid invoice id' in results[1]['error']
        assert Invoice.objects.filter(id=invoice_id).exists()

    def test_push_malformed_invoice_is_reported(self, authenticated_client, user, store,
                                                invoice_data, invoice_id):
        broken = dict(invoice_data, invoice_number='INV-OFF-002', customer_id='pelanggan-1',
                      items='Cincin emas')

        response = authenticated_client.post(reverse('sync:push'), {
            'items': [
                {'action': 'create', 'entity_type': 'invoice',
                 'entity_id': '0d8a3b4e-1f2c-4a5b-8c6d-7e8f9a0b1c2d', 'data': broken},
                {'action': 'create', 'entity_type': 'invoice', 'entity_id': invoice_id,
                 'data': invoice_data},
                {'action': 'update', 'entity_type': 'settings', 'entity_id': 'settings',
                 'data': {'brand_color': 'blue'}},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        results = response.data['results']
        assert [result['success'] for result in results] == [False, True, False]
        assert 'customer_id' in results[0]['error']
        assert 'brand_color' in results[2]['error']
        assert Invoice.objects.filter(user=user).count() == 1

    def test_run_and_status_do_not_keep_services(self, authenticated_client, user):
        authenticated_client.post(reverse('sync:run'))
        authenticated_client.get(reverse('sync:status'))

        assert user.id not in sync_service._services

    def test_push_requires_items(self, authenticated_client):
        response = authenticated_client.post(reverse('sync:push'), {'items': []}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Change feed and import
# =============================================================================

@pytest.mark.django_db
class TestChangesAPI:

    def test_changes_filtered_by_table(self, authenticated_client, store):
        response = authenticated_client.get(reverse('sync:changes'), {'tables': 'stores'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['event'] == 'INSERT'
        assert response.data[0]['record_id'] == str(store.id)
        assert {event['table'] for event in response.data} == {'stores'}

    def test_invalid_since(self, authenticated_client):
        response = authenticated_client.get(reverse('sync:changes'), {'since': 'yesterday'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestImportAPI:

    def test_import(self, authenticated_client, user, invoice_data):
        response = authenticated_client.post(reverse('sync:import'), {
            'settings': {'name': 'Toko Lama'},
            'invoices': [invoice_data],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['settings_synced'] is True
        assert response.data['invoices_synced'] == 1
        assert Invoice.objects.filter(user=user).count() == 1

    def test_import_malformed_invoice(self, authenticated_client, user, invoice_data):
        broken = dict(invoice_data, invoice_number='INV-OFF-002',
                      items=[{'description': 'Cincin', 'quantity': 'NaN', 'price': '1000'}])

        response = authenticated_client.post(reverse('sync:import'), {
            'invoices': [broken, invoice_data],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['invoices_synced'] == 1
        assert response.data['errors'][0].startswith('Invoice INV-OFF-002:')
