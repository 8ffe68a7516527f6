import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User

PASSWORD = 'EmasMurni#2025'


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    """A store owner without subscription or store rows."""
    return User.objects.create_user(
        email='pemilik@tokoemas.id',
        password=PASSWORD,
        display_name='Pak Budi',
    )


@pytest.fixture
def user_inactive(db):
    return User.objects.create_user(
        email='nonaktif@tokoemas.id',
        password=PASSWORD,
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
