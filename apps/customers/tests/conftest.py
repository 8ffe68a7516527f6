import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.customers.services import create_customer
from apps.stores.services import create_store
from apps.subscriptions.services import upgrade_to_tier


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a premium test user."""
    user = User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Store Owner',
    )
    upgrade_to_tier(user=user, tier='premium')
    return user


@pytest.fixture
def free_user(db):
    return User.objects.create_user(
        email='free@example.com',
        password='TestPass123!',
        display_name='Free Owner',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def free_client(free_user):
    client = APIClient()
    refresh = RefreshToken.for_user(free_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def store(user):
    return create_store(user=user, name='Toko Emas', address='Jl. Merdeka 1')


@pytest.fixture
def free_store(free_user):
    return create_store(user=free_user, name='Toko Gratis', address='Jl. Lain 2')


@pytest.fixture
def customer(user, store):
    return create_customer(
        user=user,
        store_id=store.id,
        name='Budi Santoso',
        phone='081234567890',
        address='Jl. Kenanga 10, Bandung',
        email='budi@example.com',
    )
