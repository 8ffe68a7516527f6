import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
PASSWORD = 'EmasMurni#2025'


# =============================================================================
# Registration
# =============================================================================

@pytest.mark.django_db
class TestRegisterAPI:

    def test_register_returns_tokens(self, api_client):
        response = api_client.post(reverse('accounts:register'), {
            'email': 'baru@tokoemas.id',
            'password': PASSWORD,
            'password_confirm': PASSWORD,
            'display_name': 'Bu Sari',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert set(response.data['tokens']) == {'access', 'refresh'}
        assert response.data['user']['name'] == 'Bu Sari'

    def test_duplicate_email(self, api_client, user):
        response = api_client.post(reverse('accounts:register'), {
            'email': user.email,
            'password': PASSWORD,
            'password_confirm': PASSWORD,
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'already registered' in response.data['error']

    def test_password_mismatch(self, api_client):
        response = api_client.post(reverse('accounts:register'), {
            'email': 'baru@tokoemas.id',
            'password': PASSWORD,
            'password_confirm': 'lain-lagi',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data
        assert not User.objects.filter(email='baru@tokoemas.id').exists()

    def test_weak_password(self, api_client):
        response = api_client.post(reverse('accounts:register'), {
            'email': 'baru@tokoemas.id',
            'password': '123',
            'password_confirm': '123',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data


# =============================================================================
# Login and logout
# =============================================================================

@pytest.mark.django_db
class TestSessionAPI:

    def test_login(self, api_client, user):
        response = api_client.post(reverse('accounts:login'), {'email': user.email, 'password': PASSWORD})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == user.email
        assert 'access' in response.data['tokens']

    def test_login_wrong_password(self, api_client, user):
        response = api_client.post(reverse('accounts:login'), {'email': user.email, 'password': 'salah'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive(self, api_client, user_inactive):
        response = api_client.post(reverse('accounts:login'), {
            'email': user_inactive.email,
            'password': PASSWORD,
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_logout(self, authenticated_client, user):
        refresh = RefreshToken.for_user(user)

        response = authenticated_client.post(reverse('accounts:logout'), {'refresh': str(refresh)})

        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_logout_invalid_token(self, authenticated_client):
        response = authenticated_client.post(reverse('accounts:logout'), {'refresh': 'bukan-token'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_requires_auth(self, api_client):
        response = api_client.post(reverse('accounts:logout'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_token(self, api_client, user):
        refresh = RefreshToken.for_user(user)

        response = api_client.post(reverse('token_refresh'), {'refresh': str(refresh)})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data


# =============================================================================
# Profile
# =============================================================================

@pytest.mark.django_db
class TestProfileAPI:

    def test_current_user_overview(self, authenticated_client, user):
        response = authenticated_client.get(reverse('accounts:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == user.email
        assert response.data['subscription']['tier'] == 'free'
        assert response.data['default_store_id'] is None

    def test_update_display_name_only(self, authenticated_client, user):
        response = authenticated_client.patch(
            reverse('accounts:update-profile'),
            {'display_name': 'Bu Sari', 'email': 'lain@tokoemas.id', 'is_admin': True},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.display_name == 'Bu Sari'
        assert user.email == 'pemilik@tokoemas.id'
        assert user.is_staff is False

    def test_password_change(self, authenticated_client, user):
        response = authenticated_client.post(reverse('accounts:password-change'), {
            'current_password': PASSWORD,
            'new_password': 'Perak&Emas-99',
        })

        assert response.status_code == status.HTTP_204_NO_CONTENT
        user.refresh_from_db()
        assert user.check_password('Perak&Emas-99')

    def test_password_change_wrong_current(self, authenticated_client):
        response = authenticated_client.post(reverse('accounts:password-change'), {
            'current_password': 'salah',
            'new_password': 'Perak&Emas-99',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
