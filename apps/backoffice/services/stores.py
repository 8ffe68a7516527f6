"""
Store administration.
"""

import logging
from uuid import UUID

from django.db.models import Count, Q

from apps.stores.models import Store
from apps.stores.services import reset_invoice_counter

from .exceptions import RecordNotFoundError

logger = logging.getLogger(__name__)


def _store_queryset():
    return (
        Store.objects
        .select_related('user')
        .annotate(invoice_count=Count('invoices'))
    )


def list_stores(*, search: str = None, is_active: bool = None):
    """
    All stores, newest first.

    Args:
        search: Case-insensitive match on name, slug or owner email
        is_active: Only active (True) or deactivated (False) stores
    """
    queryset = _store_queryset().order_by('-created_at')
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(slug__icontains=search) | Q(user__email__icontains=search)
        )
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    return queryset


def get_store_detail(*, store_id: UUID) -> Store:
    try:
        return _store_queryset().prefetch_related('contacts').get(id=store_id)
    except Store.DoesNotExist:
        raise RecordNotFoundError(f"Store with ID {store_id} not found")


def toggle_store_active(*, store_id: UUID) -> Store:
    store = get_store_detail(store_id=store_id)
    store.is_active = not store.is_active
    store.save(update_fields=['is_active', 'updated_at'])
    logger.info("Admin set store %s active=%s", str(store_id)[:8], store.is_active)
    return store


def reset_store_counter(*, store_id: UUID) -> Store:
    """Restart the store's invoice numbering at 1."""
    reset_invoice_counter(store=get_store_detail(store_id=store_id))
    return get_store_detail(store_id=store_id)
