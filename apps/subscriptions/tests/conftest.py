import httpx
import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.subscriptions.models import PaymentTransaction
from apps.subscriptions.services import MayarClient, upgrade_to_tier


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a free tier user."""
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
def premium_user(db):
    """Create a user with an active premium subscription."""
    user = User.objects.create_user(
        email='premium@example.com',
        password='TestPass123!',
        display_name='Premium Owner',
    )
    upgrade_to_tier(user=user, tier='premium')
    return user


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def pending_payment(user):
    """A checkout waiting for the provider."""
    return PaymentTransaction.objects.create(
        user=user,
        mayar_invoice_id='trx-123',
        mayar_transaction_id='prod-123',
        amount=1000,
        tier='premium',
        payment_url='https://pay.example.com/trx-123',
    )


@pytest.fixture
def mayar_factory():
    """
    Build a MayarClient backed by an httpx MockTransport.

    The handler receives each request; ``calls`` records them.
    """
    def _build(handler):
        calls = []

        def _handler(request):
            calls.append(request)
            return handler(request)

        client = MayarClient(
            api_key='test-key',
            base_url='https://mayar.test',
            timeout=5,
            retry_delay=0,
            transport=httpx.MockTransport(_handler),
        )
        return client, calls

    return _build
