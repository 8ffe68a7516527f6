import pytest
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.invoices.services import create_invoice_with_items
from apps.stores.services import create_store
from apps.subscriptions.models import PaymentStatus, PaymentTransaction, SubscriptionPlan


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Admin',
        is_staff=True,
    )


@pytest.fixture
def user(db):
    """Create and return a regular store owner."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Store Owner',
    )


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def owner_client(user):
    return _client_for(user)


@pytest.fixture
def store(user):
    return create_store(user=user, name='Toko Emas Sejahtera', store_code='JKT')


@pytest.fixture
def invoice(user, store):
    return create_invoice_with_items(
        user=user,
        data={'customer_name': 'Budi Santoso', 'store_id': store.id},
        items=[{'description': 'Cincin emas', 'quantity': 1, 'price': '1500000'}],
    )


@pytest.fixture
def payment(user):
    return PaymentTransaction.objects.create(
        user=user,
        mayar_invoice_id='trx-123',
        amount=1000,
        tier='premium',
        status=PaymentStatus.COMPLETED,
        completed_at=timezone.now(),
        payment_method='qris',
    )


@pytest.fixture
def plan(db):
    return SubscriptionPlan.objects.create(
        tier='premium',
        name='Premium',
        price=1000,
        invoice_limit=200,
        duration=30,
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()
