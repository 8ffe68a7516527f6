import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from apps.subscriptions.models import SubscriptionPlan


# =============================================================================
# Status and features
# =============================================================================

@pytest.mark.django_db
class TestSubscriptionStatus:
    """Tests for GET /api/subscriptions/status/."""

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('subscriptions:status'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_free_user_status(self, authenticated_client):
        response = authenticated_client.get(reverse('subscriptions:status'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['tier'] == 'free'
        assert response.data['invoice_limit'] == 10
        assert response.data['remaining_invoices'] == 10
        assert response.data['is_premium'] is False

    def test_premium_user_status(self, api_client, premium_user):
        refresh = RefreshToken.for_user(premium_user)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')

        response = api_client.get(reverse('subscriptions:status'))

        assert response.data['tier'] == 'premium'
        assert response.data['invoice_limit'] == 200


@pytest.mark.django_db
class TestSubscriptionFeatures:
    """Tests for GET /api/subscriptions/features/."""

    def test_free_features(self, authenticated_client):
        response = authenticated_client.get(reverse('subscriptions:features'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['tier'] == 'free'
        assert response.data['has_logo'] is False
        assert response.data['export_qualities'] == ['standard']


@pytest.mark.django_db
class TestPlanList:
    """Tests for the public pricing endpoint."""

    def test_defaults_without_plans(self, api_client):
        response = api_client.get(reverse('subscriptions:plans'))

        assert response.status_code == status.HTTP_200_OK
        tiers = [plan['tier'] for plan in response.data]
        assert tiers == ['free', 'premium']
        assert response.data[0]['price_formatted'] == 'Gratis'

    def test_active_plans_only(self, api_client):
        SubscriptionPlan.objects.create(tier='free', name='Free', price=0, sort_order=0)
        SubscriptionPlan.objects.create(tier='premium', name='Premium', price=15000, is_active=False)

        response = api_client.get(reverse('subscriptions:plans'))

        assert len(response.data) == 1
        assert response.data[0]['name'] == 'Free'
