"""Profile and password operations for a signed-in store owner."""

import logging

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction

from apps.stores.services import get_default_store
from apps.subscriptions.services import get_subscription_status
from .exceptions import InvalidCredentialsError, PasswordChangeError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ('display_name',)


def update_profile(*, user, **fields):
    """Apply editable profile fields; anything else is ignored."""
    changed = [name for name in PROFILE_FIELDS if name in fields]
    for name in changed:
        setattr(user, name, fields[name])
    if changed:
        user.save(update_fields=changed)
    return user


@transaction.atomic
def change_password(*, user, current_password: str, new_password: str):
    """
    Replace the user's password after checking the current one.

    Raises:
        InvalidCredentialsError: ``current_password`` is wrong
        PasswordChangeError: ``new_password`` fails validation
    """
    if not user.check_password(current_password):
        raise InvalidCredentialsError("Current password is incorrect")

    try:
        validate_password(new_password, user=user)
    except ValidationError as e:
        raise PasswordChangeError(' '.join(e.messages))

    user.set_password(new_password)
    user.save(update_fields=['password'])

    logger.info("Password changed for user %s", str(user.id)[:8])
    return user


def get_account_overview(*, user) -> dict:
    """The signed-in owner together with their plan and default store."""
    store = get_default_store(user=user)
    return {
        'user': user,
        'subscription': get_subscription_status(user=user),
        'default_store_id': store.id if store else None,
    }
