"""
Store contact service.

A store has at most one primary contact; promoting a contact demotes the
others in the same transaction.
"""

from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.stores.models import Store, StoreContact

from .exceptions import ContactNotFoundError
from .store_management import get_store, verify_store_ownership

DEFAULT_CONTACT_NAME = 'Store Owner'


def _demote_others(store: Store, keep_id=None) -> None:
    queryset = StoreContact.objects.filter(store=store, is_primary=True)
    if keep_id is not None:
        queryset = queryset.exclude(id=keep_id)
    queryset.update(is_primary=False)


def get_contact(*, contact_id: UUID, user) -> StoreContact:
    """
    Raises:
        ContactNotFoundError: If the contact doesn't exist
        StoreAccessDenied: If its store belongs to someone else
    """
    try:
        contact = StoreContact.objects.select_related('store').get(id=contact_id)
    except StoreContact.DoesNotExist:
        raise ContactNotFoundError(f"Contact with ID {contact_id} not found")

    verify_store_ownership(store=contact.store, user=user)
    return contact


def get_contacts(*, store: Store):
    return StoreContact.objects.filter(store=store).order_by('-is_primary', 'created_at')


def get_primary_contact(*, store: Store) -> Optional[StoreContact]:
    return StoreContact.objects.filter(store=store, is_primary=True).first()


@transaction.atomic
def create_contact(*, store_id: UUID, user, name: str, title: str = None,
                   signature: str = None, is_primary: bool = False) -> StoreContact:
    store = get_store(store_id=store_id, user=user)

    # The first contact of a store is always primary
    if not StoreContact.objects.filter(store=store).exists():
        is_primary = True
    if is_primary:
        _demote_others(store)

    return StoreContact.objects.create(
        store=store,
        name=name,
        title=title,
        signature=signature,
        is_primary=is_primary,
    )


@transaction.atomic
def update_contact(*, contact_id: UUID, user, **fields) -> StoreContact:
    contact = get_contact(contact_id=contact_id, user=user)

    if fields.pop('is_primary', False) and not contact.is_primary:
        _demote_others(contact.store, keep_id=contact.id)
        contact.is_primary = True

    for key in ('name', 'title', 'signature'):
        if key in fields:
            setattr(contact, key, fields[key])
    contact.save()
    return contact


@transaction.atomic
def delete_contact(*, contact_id: UUID, user) -> None:
    """Delete a contact; when it was primary the oldest remaining one takes over."""
    contact = get_contact(contact_id=contact_id, user=user)
    store = contact.store
    was_primary = contact.is_primary
    contact.delete()

    if was_primary:
        successor = StoreContact.objects.filter(store=store).order_by('created_at').first()
        if successor is not None:
            successor.is_primary = True
            successor.save(update_fields=['is_primary', 'updated_at'])


@transaction.atomic
def set_primary_contact(*, contact_id: UUID, user) -> StoreContact:
    contact = get_contact(contact_id=contact_id, user=user)
    _demote_others(contact.store, keep_id=contact.id)
    if not contact.is_primary:
        contact.is_primary = True
        contact.save(update_fields=['is_primary', 'updated_at'])
    return contact


@transaction.atomic
def update_primary_contact(*, store: Store, name: str = None, title: str = None,
                           signature: str = None) -> StoreContact:
    """
    Update the store's primary contact, creating it when missing.

    Only the given values are changed on an existing contact. A new contact
    is named ``Store Owner`` unless a name is given.
    """
    contact = get_primary_contact(store=store)
    if contact is None:
        _demote_others(store)
        return StoreContact.objects.create(
            store=store,
            name=name or DEFAULT_CONTACT_NAME,
            title=title,
            signature=signature,
            is_primary=True,
        )

    if name:
        contact.name = name
    if title is not None:
        contact.title = title
    if signature is not None:
        contact.signature = signature
    contact.save()
    return contact
