import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
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
    """The user's first (and default) store."""
    return create_store(
        user=user,
        name='Toko Emas Sejahtera',
        address='Jl. Merdeka No. 1, Jakarta',
        whatsapp='081234567890',
        store_code='JKT',
    )


@pytest.fixture
def other_store(other_user):
    return create_store(user=other_user, name='Other Store', address='Jl. Lain 2')
