"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    PasswordChangeError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .account_management import (
    update_profile,
    change_password,
    get_account_overview,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'PasswordChangeError',
    # Registration and login
    'register_user',
    'authenticate_user',
    # Profile
    'update_profile',
    'change_password',
    'get_account_overview',
]
