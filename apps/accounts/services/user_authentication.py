"""Login service for store owners."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check an email/password pair and stamp ``last_login``.

    The lookup is case-insensitive because registration refuses emails that
    differ only by case.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: The account was deactivated by an admin
    """
    user = (
        User.objects
        .select_for_update()
        .filter(email__iexact=email)
        .first()
    )
    if user is None or not user.check_password(password):
        logger.info("Rejected login attempt")
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return user
