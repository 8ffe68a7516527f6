"""User preferences service."""

from django.db import transaction

from apps.stores.models import Store, UserPreferences

from .exceptions import InvalidPreferenceError, StoreNotFoundError

PREFERENCE_FIELDS = {
    'preferred_language', 'timezone', 'date_format', 'currency',
    'tax_enabled', 'tax_percentage', 'export_quality', 'default_store',
}


def get_or_create_preferences(*, user) -> UserPreferences:
    preferences, _ = UserPreferences.objects.get_or_create(user=user)
    return preferences


@transaction.atomic
def update_preferences(*, user, **fields) -> UserPreferences:
    """
    Update preferences.

    Raises:
        InvalidPreferenceError: Export quality not included in the user's tier
        StoreNotFoundError: Default store is not an active store of the user
    """
    from apps.subscriptions.services import get_export_qualities

    preferences = get_or_create_preferences(user=user)
    fields = {key: value for key, value in fields.items() if key in PREFERENCE_FIELDS}

    quality = fields.get('export_quality')
    if quality is not None and quality not in get_export_qualities(user=user):
        raise InvalidPreferenceError(
            f"Export quality '{quality}' is not available on your plan"
        )

    if 'default_store' in fields:
        store = fields['default_store']
        if store is not None:
            store_id = getattr(store, 'id', store)
            store = Store.objects.filter(id=store_id, user=user, is_active=True).first()
            if store is None:
                raise StoreNotFoundError("Default store not found")
        fields['default_store'] = store

    for key, value in fields.items():
        setattr(preferences, key, value)
    preferences.save()
    return preferences
