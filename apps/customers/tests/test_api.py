import pytest
from django.urls import reverse
from rest_framework import status


@pytest.mark.django_db
class TestCustomerAPI:
    """Tests for /api/customers/."""

    def test_list_for_store(self, authenticated_client, store, customer):
        response = authenticated_client.get(reverse('customers:customer-list'), {'store': str(store.id)})

        assert response.status_code == status.HTTP_200_OK
        assert [c['name'] for c in response.data] == ['Budi Santoso']

    def test_list_defaults_to_default_store(self, authenticated_client, customer):
        response = authenticated_client.get(reverse('customers:customer-list'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

    def test_search(self, authenticated_client, store, customer):
        response = authenticated_client.get(
            reverse('customers:customer-list'),
            {'store': str(store.id), 'search': 'nothing'}
        )

        assert response.data == []

    def test_create_normalizes_phone(self, authenticated_client, store):
        data = {
            'store_id': str(store.id),
            'name': '  Siti  ',
            'phone': '+62 812-3456-7890',
            'address': 'Jl. Melati 7',
            'status': 'Distributor',
        }

        response = authenticated_client.post(reverse('customers:customer-list'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Siti'
        assert response.data['phone'] == '+6281234567890'
        assert response.data['status'] == 'Distributor'

    @pytest.mark.parametrize('field,value', [
        ('name', 'A'),
        ('phone', '12ab'),
        ('address', 'Jl.'),
        ('email', 'not-an-email'),
    ])
    def test_create_validation(self, authenticated_client, store, field, value):
        data = {
            'store_id': str(store.id),
            'name': 'Siti',
            'phone': '081234567890',
            'address': 'Jl. Melati 7',
        }
        data[field] = value

        response = authenticated_client.post(reverse('customers:customer-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data

    def test_patch(self, authenticated_client, customer):
        url = reverse('customers:customer-detail', kwargs={'pk': customer.id})

        response = authenticated_client.patch(url, {'status': 'Reseller'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'Reseller'

    def test_delete(self, authenticated_client, customer):
        url = reverse('customers:customer-detail', kwargs={'pk': customer.id})

        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert authenticated_client.get(url).status_code == status.HTTP_404_NOT_FOUND

    def test_free_user_gets_premium_required(self, free_client, free_store):
        response = free_client.get(reverse('customers:customer-list'), {'store': str(free_store.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['detail'].code == 'premium_required'
