import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.stores.services import create_store


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Store Owner',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other Owner',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def store(user):
    return create_store(
        user=user,
        name='Toko Emas Sejahtera',
        address='Jl. Merdeka No. 1, Jakarta',
        store_code='JKT',
    )


@pytest.fixture
def invoice_data():
    """Invoice payload the way an offline client queues it."""
    return {
        'invoice_number': 'INV-OFF-001',
        'invoice_date': '2025-03-07',
        'customer_name': 'Budi Santoso',
        'customer_phone': '081234567890',
        'shipping_cost': '10000',
        'items': [
            {'description': 'Cincin emas', 'quantity': 2, 'price': '150000'},
        ],
    }


@pytest.fixture
def invoice_id():
    return '7c1f5a52-3d6e-4f0b-9a59-2f1f0d7c9e11'
