"""Owner sign-up."""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from apps.stores.services import get_or_create_preferences
from apps.subscriptions.services import get_or_create_subscription
from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(*, email: str, password: str, display_name: str = "") -> User:
    """
    Create an owner with a free subscription and default preferences.

    Raises:
        UserRegistrationError: The email is taken, compared case-insensitively
    """
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("Registration failed: email already registered")

    try:
        user = User.objects.create_user(email=email, password=password, display_name=display_name)
    except IntegrityError as e:
        raise UserRegistrationError(f"Registration failed: {e}")

    get_or_create_subscription(user=user)
    get_or_create_preferences(user=user)

    logger.info("Registered user %s", str(user.id)[:8])
    return user
