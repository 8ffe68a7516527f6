"""
Replaying offline writes.

A queued item, or an item pushed by an offline client, is applied with the
same services the regular API uses, so quotas and validation still hold.
Invoice payloads go through the API's input serializer first; settings are
checked by the store model's validators.
"""

import logging
import uuid

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework.exceptions import APIException

from apps.invoices.serializers import InvoiceInputSerializer
from apps.invoices.services import (
    delete_invoice,
    upsert_invoice_with_items,
    InvoiceNotFoundError,
    InvoicesServiceError,
)
from apps.stores.services import (
    create_store,
    delete_store,
    get_default_store,
    update_primary_contact,
    update_store,
    StoresServiceError,
)
from apps.stores.services.store_management import STORE_FIELDS
from apps.sync.models import SyncAction, SyncEntity

from .exceptions import SyncServiceError, UnsupportedSyncItemError
from .queue import validate_item_kind

logger = logging.getLogger(__name__)

# Failures that reject a single item without stopping a batch
REPLAY_ERRORS = (
    SyncServiceError,
    InvoicesServiceError,
    StoresServiceError,
    APIException,
    DjangoValidationError,
)

DEFAULT_STORE_NAME = 'My Store'
CONTACT_FIELDS = ('admin_name', 'admin_title', 'signature')


def _invoice_id(value) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise UnsupportedSyncItemError(f"Invalid invoice id: {value}")


def _flatten_errors(errors, prefix=''):
    """``field: message`` lines from nested serializer errors."""
    if isinstance(errors, dict):
        for key, value in errors.items():
            yield from _flatten_errors(value, f"{prefix}{key}.")
    elif isinstance(errors, list):
        for index, value in enumerate(errors):
            if isinstance(value, (dict, list)):
                yield from _flatten_errors(value, f"{prefix}{index}.")
            else:
                yield f"{prefix.rstrip('.')}: {value}"


def _split_invoice(data, entity_id=None, partial=False) -> tuple:
    """
    Validate an invoice payload and separate its items.

    Raises:
        UnsupportedSyncItemError: If the payload is not a valid invoice
    """
    if not isinstance(data, dict):
        raise UnsupportedSyncItemError("Invoice data must be an object")

    payload = dict(data)
    if entity_id and not payload.get('id'):
        payload['id'] = str(_invoice_id(entity_id))

    serializer = InvoiceInputSerializer(data=payload, partial=partial)
    if not serializer.is_valid():
        raise UnsupportedSyncItemError(
            "Invalid invoice data: " + '; '.join(_flatten_errors(serializer.errors))
        )

    validated = dict(serializer.validated_data)
    items = validated.pop('items', None)
    if items is not None:
        items = [dict(item) for item in items]
    return validated, items


@transaction.atomic
def apply_settings(*, user, data: dict):
    """
    Write store settings to the user's default store, creating one if needed.

    ``admin_name``, ``admin_title`` and ``signature`` go to the store's
    primary contact.

    Returns:
        The updated or created Store

    Raises:
        UnsupportedSyncItemError: If ``data`` is not an object
        InvalidStoreDataError: If a store field fails validation
    """
    if not isinstance(data, dict):
        raise UnsupportedSyncItemError("Settings data must be an object")

    fields = {key: value for key, value in data.items() if key in STORE_FIELDS}
    store = get_default_store(user=user)

    if store is None:
        name = fields.pop('name', None) or DEFAULT_STORE_NAME
        store = create_store(user=user, name=name, **fields)
    elif fields:
        store = update_store(store_id=store.id, user=user, **fields)

    contact = {key: data.get(key) for key in CONTACT_FIELDS}
    if contact['admin_name']:
        if any(value is not None and not isinstance(value, str) for value in contact.values()):
            raise UnsupportedSyncItemError("admin_name, admin_title and signature must be text")
        update_primary_contact(
            store=store,
            name=contact['admin_name'],
            title=contact['admin_title'],
            signature=contact['signature'],
        )
    return store


def _apply_settings_item(user, action: str, data: dict) -> None:
    if action != SyncAction.DELETE:
        apply_settings(user=user, data=data)
        return

    store = get_default_store(user=user)
    if store is not None:
        delete_store(store_id=store.id, user=user)


def _apply_invoice_item(user, action: str, entity_id: str, data: dict) -> None:
    if action == SyncAction.DELETE:
        invoice_id = _invoice_id(entity_id)
        try:
            delete_invoice(user=user, invoice_id=invoice_id)
        except InvoiceNotFoundError:
            logger.info("Invoice %s already deleted", str(invoice_id)[:8])
        return

    payload, items = _split_invoice(data, entity_id, partial=action == SyncAction.UPDATE)
    upsert_invoice_with_items(user=user, data=payload, items=items)


@transaction.atomic
def apply_item(*, user, action: str, entity_type: str, entity_id: str, data: dict = None) -> None:
    """
    Apply one offline write for ``user``.

    The write is all-or-nothing: a rejected item leaves no partial changes.

    Args:
        user: Owner of the write
        action: create, update, upsert or delete
        entity_type: settings, invoice or invoice_item
        entity_id: Id of the entity on the client
        data: Entity payload in the API's field names

    Raises:
        UnsupportedSyncItemError: If the item kind is unknown or its data is malformed
        InvoicesServiceError, StoresServiceError: If the write is rejected
        InvoiceLimitExceeded: If creating an invoice exceeds the quota
    """
    validate_item_kind(action, entity_type)
    if data is None:
        data = {}

    if entity_type == SyncEntity.SETTINGS:
        _apply_settings_item(user, action, data)
    elif entity_type == SyncEntity.INVOICE:
        _apply_invoice_item(user, action, entity_id, data)
    else:
        # Items travel inside their invoice
        logger.warning("Ignoring standalone %s %s for %s", entity_type, action, entity_id)


def _import_label(invoice, index: int) -> str:
    if isinstance(invoice, dict):
        return invoice.get('invoice_number') or invoice.get('id') or f"#{index + 1}"
    return f"#{index + 1}"


def sync_local_data(*, user, settings: dict = None, invoices: list = None) -> dict:
    """
    Import data a client collected before signing up.

    Each invoice is written on its own; a rejected one is reported and the
    rest of the batch continues.

    Returns:
        dict with ``settings_synced``, ``invoices_synced`` and ``errors``
    """
    result = {'settings_synced': False, 'invoices_synced': 0, 'errors': []}

    if settings:
        try:
            apply_settings(user=user, data=settings)
            result['settings_synced'] = True
        except REPLAY_ERRORS as e:
            logger.warning("Settings import failed for user %s: %s", str(user.id)[:8], e)
            result['errors'].append(f"Settings: {e}")

    for index, invoice in enumerate(invoices or []):
        label = _import_label(invoice, index)
        try:
            payload, items = _split_invoice(invoice)
            upsert_invoice_with_items(user=user, data=payload, items=items)
        except REPLAY_ERRORS as e:
            logger.warning("Invoice import %s failed for user %s: %s", label, str(user.id)[:8], e)
            result['errors'].append(f"Invoice {label}: {e}")
            continue
        result['invoices_synced'] += 1

    logger.info(
        "Imported %d invoices for user %s (%d errors)",
        result['invoices_synced'], str(user.id)[:8], len(result['errors']),
    )
    return result
