import pytest
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.invoices.services import create_invoice_with_items
from apps.stores.services import create_store
from apps.subscriptions.services import upgrade_to_tier


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
def premium_user(user):
    upgrade_to_tier(user=user, tier='premium')
    return user


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
        whatsapp='081234567890',
        store_code='JKT',
    )


@pytest.fixture
def items():
    return [
        {'description': 'Cincin emas', 'quantity': 2, 'price': '150000.00'},
        {'description': 'Kalung', 'quantity': 1, 'price': '250000.50'},
    ]


@pytest.fixture
def make_invoice(user, items):
    """Create an invoice for ``user`` (or another owner) with the default items."""
    def _make(owner=None, **data):
        data.setdefault('customer_name', 'Budi')
        return create_invoice_with_items(user=owner or user, data=data, items=items)
    return _make


@pytest.fixture
def invoice(store, make_invoice):
    return make_invoice(store_id=store.id, invoice_date=date(2025, 3, 7))
