"""
Customer book service.

Every operation is premium-only (``has_customer_book``) and scoped to a store
the user owns. Customers are soft-deleted.
"""

import logging
from uuid import UUID

from django.db import transaction
from django.db.models import Q

from apps.customers.models import Customer
from apps.stores.services import get_store
from apps.subscriptions.services import require_feature

from .exceptions import CustomerNotFoundError

logger = logging.getLogger(__name__)

CUSTOMER_BOOK_MESSAGE = 'Customer management requires a Premium subscription.'

CUSTOMER_FIELDS = {'name', 'phone', 'address', 'email', 'notes', 'status'}


def _require_customer_book(user) -> None:
    require_feature(user=user, feature='has_customer_book', message=CUSTOMER_BOOK_MESSAGE)


def list_customers(*, user, store_id: UUID, search: str = None):
    """
    Active customers of a store, ordered by name.

    Args:
        user: Store owner
        store_id: Store UUID
        search: Optional case-insensitive match on name, phone or email

    Raises:
        FeatureNotAvailable: If the user's tier has no customer book
        StoreNotFoundError / StoreAccessDenied: From store lookup
    """
    _require_customer_book(user)
    store = get_store(store_id=store_id, user=user)

    queryset = Customer.objects.filter(store=store, is_active=True)
    if search:
        search = search.strip()
        queryset = queryset.filter(
            Q(name__icontains=search) |
            Q(phone__icontains=search) |
            Q(email__icontains=search)
        )
    return queryset.order_by('name')


def get_customer(*, customer_id: UUID, user) -> Customer:
    """
    Raises:
        CustomerNotFoundError: If missing, inactive or in another user's store
    """
    _require_customer_book(user)
    try:
        return Customer.objects.select_related('store').get(
            id=customer_id,
            store__user=user,
            is_active=True,
        )
    except Customer.DoesNotExist:
        raise CustomerNotFoundError(f"Customer with ID {customer_id} not found")


@transaction.atomic
def create_customer(*, user, store_id: UUID, **fields) -> Customer:
    _require_customer_book(user)
    store = get_store(store_id=store_id, user=user)

    customer = Customer.objects.create(
        store=store,
        **{key: value for key, value in fields.items() if key in CUSTOMER_FIELDS}
    )
    logger.info("Created customer %s in store %s", str(customer.id)[:8], str(store.id)[:8])
    return customer


@transaction.atomic
def update_customer(*, customer_id: UUID, user, **fields) -> Customer:
    customer = get_customer(customer_id=customer_id, user=user)

    for key, value in fields.items():
        if key in CUSTOMER_FIELDS:
            setattr(customer, key, value)
    customer.save()
    return customer


@transaction.atomic
def delete_customer(*, customer_id: UUID, user) -> None:
    """Soft delete; invoices keep their copy of the customer's details."""
    customer = get_customer(customer_id=customer_id, user=user)
    customer.is_active = False
    customer.save(update_fields=['is_active', 'updated_at'])
