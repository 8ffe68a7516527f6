"""
Authentication and profile endpoints.

Tokens are issued by simplejwt; the refresh endpoint lives in the root
URL configuration.
"""

from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema

from .serializers import (
    AccountOverviewSerializer,
    LoginInputSerializer,
    LogoutInputSerializer,
    PasswordChangeInputSerializer,
    RegisterInputSerializer,
    UserSerializer,
)
from .services import (
    authenticate_user,
    change_password,
    get_account_overview,
    register_user,
    update_profile,
    # Exceptions
    InactiveAccountError,
    InvalidCredentialsError,
    PasswordChangeError,
    UserRegistrationError,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class TokenPairSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    tokens = TokenPairSerializer()


def _auth_response(user, status_code=status.HTTP_200_OK):
    refresh = RefreshToken.for_user(user)
    return Response({
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        },
    }, status=status_code)


# =============================================================================
# Sessions
# =============================================================================

@extend_schema(
    request=RegisterInputSerializer,
    responses={201: AuthResponseSerializer, 400: ErrorResponseSerializer},
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Create an owner account on the free tier and sign it in."""
    serializer = RegisterInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = register_user(**serializer.validated_data)
    except UserRegistrationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return _auth_response(user, status.HTTP_201_CREATED)


@extend_schema(
    request=LoginInputSerializer,
    responses={200: AuthResponseSerializer, 401: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    serializer = LoginInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = authenticate_user(**serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return _auth_response(user)


@extend_schema(
    request=LogoutInputSerializer,
    responses={204: None, 400: ErrorResponseSerializer},
    description="Ends the session. A refresh token, when sent, must still be valid.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    serializer = LogoutInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    token = serializer.validated_data.get('refresh')
    if token:
        try:
            RefreshToken(token)
        except TokenError:
            return Response({'error': 'Invalid token'}, status=status.HTTP_400_BAD_REQUEST)

    return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Profile
# =============================================================================

@extend_schema(responses={200: AccountOverviewSerializer}, tags=['auth'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_user(request):
    """The owner's profile with plan usage and default store."""
    overview = get_account_overview(user=request.user)
    return Response(AccountOverviewSerializer(overview).data)


@extend_schema(request=UserSerializer, responses={200: UserSerializer}, tags=['auth'])
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_current_user(request):
    serializer = UserSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    user = update_profile(user=request.user, **serializer.validated_data)
    return Response(UserSerializer(user).data)


@extend_schema(
    request=PasswordChangeInputSerializer,
    responses={204: None, 400: ErrorResponseSerializer},
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def password_change(request):
    serializer = PasswordChangeInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        change_password(user=request.user, **serializer.validated_data)
    except (InvalidCredentialsError, PasswordChangeError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(status=status.HTTP_204_NO_CONTENT)
