"""
Store management service.

Stores are soft-deleted; the user's default store lives in UserPreferences.
"""

import logging
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.text import slugify

from apps.stores.models import Store

from .exceptions import InvalidStoreDataError, StoreAccessDenied, StoreNotFoundError
from .preferences import get_or_create_preferences

logger = logging.getLogger(__name__)

# Fields an owner may set through create/update
STORE_FIELDS = {
    'name', 'logo', 'address', 'whatsapp', 'phone', 'email', 'website',
    'store_description', 'tagline', 'store_number', 'payment_method',
    'brand_color', 'invoice_prefix', 'store_code', 'invoice_number_format',
    'invoice_number_padding', 'reset_counter_daily',
}


def generate_unique_slug(name: str, exclude_id=None) -> str:
    """Slug from the name, with ``-2``, ``-3``... appended on collision."""
    base = slugify(name)[:250] or 'store'
    queryset = Store.objects.all()
    if exclude_id is not None:
        queryset = queryset.exclude(id=exclude_id)

    slug = base
    suffix = 2
    while queryset.filter(slug=slug).exists():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


def _clean_fields(fields: dict) -> dict:
    return {key: value for key, value in fields.items() if key in STORE_FIELDS}


def _validate_store(store: Store) -> None:
    try:
        store.full_clean()
    except ValidationError as e:
        errors = '; '.join(
            f"{field}: {' '.join(messages)}" for field, messages in e.message_dict.items()
        )
        raise InvalidStoreDataError(f"Invalid store data: {errors}")


def verify_store_ownership(*, store: Store, user) -> None:
    """
    Raises:
        StoreAccessDenied: If the store belongs to someone else
    """
    if store.user_id != user.id:
        raise StoreAccessDenied("Unauthorized: Store does not belong to authenticated user")


def get_store(*, store_id: UUID, user) -> Store:
    """
    Get an active store owned by ``user``.

    Raises:
        StoreNotFoundError: If the store doesn't exist or is inactive
        StoreAccessDenied: If the store belongs to someone else
    """
    try:
        store = Store.objects.get(id=store_id, is_active=True)
    except Store.DoesNotExist:
        raise StoreNotFoundError(f"Store with ID {store_id} not found")

    verify_store_ownership(store=store, user=user)
    return store


def get_user_stores(*, user):
    return Store.objects.filter(user=user, is_active=True).order_by('created_at')


@transaction.atomic
def create_store(*, user, name: str, **fields) -> Store:
    """
    Create a store; a user's first store becomes their default.

    Args:
        user: Owner
        name: Store name, also the source of the slug
        **fields: Any of the editable store fields

    Returns:
        Created Store instance

    Raises:
        InvalidStoreDataError: If a field fails model validation
    """
    store = Store(
        user=user,
        name=name,
        slug=generate_unique_slug(name),
        **_clean_fields(fields),
    )
    _validate_store(store)
    store.save(force_insert=True)

    preferences = get_or_create_preferences(user=user)
    if preferences.default_store_id is None:
        preferences.default_store = store
        preferences.save(update_fields=['default_store', 'updated_at'])

    logger.info("Created store %s for user %s", str(store.id)[:8], str(user.id)[:8])
    return store


@transaction.atomic
def update_store(*, store_id: UUID, user, **fields) -> Store:
    store = get_store(store_id=store_id, user=user)
    fields = _clean_fields(fields)

    if 'name' in fields and fields['name'] != store.name:
        store.slug = generate_unique_slug(fields['name'], exclude_id=store.id)

    for key, value in fields.items():
        setattr(store, key, value)
    _validate_store(store)
    store.save()
    return store


@transaction.atomic
def delete_store(*, store_id: UUID, user) -> None:
    """Soft delete; clears the user's default when it pointed here."""
    store = get_store(store_id=store_id, user=user)
    store.is_active = False
    store.save(update_fields=['is_active', 'updated_at'])

    preferences = get_or_create_preferences(user=user)
    if preferences.default_store_id == store.id:
        preferences.default_store = None
        preferences.save(update_fields=['default_store', 'updated_at'])


def get_default_store(*, user) -> Optional[Store]:
    """
    The preferred default store if still active, else the oldest active one.
    """
    preferences = get_or_create_preferences(user=user)
    if preferences.default_store_id:
        store = Store.objects.filter(id=preferences.default_store_id, user=user, is_active=True).first()
        if store is not None:
            return store

    return get_user_stores(user=user).first()


@transaction.atomic
def set_default_store(*, store_id: UUID, user) -> Store:
    store = get_store(store_id=store_id, user=user)
    preferences = get_or_create_preferences(user=user)
    preferences.default_store = store
    preferences.save(update_fields=['default_store', 'updated_at'])
    return store
