"""
Sync queue.

Writes made while the client was offline are kept per user, oldest first,
until a sync run replays them.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import F

from apps.sync.models import SyncAction, SyncEntity, SyncQueueItem

from .exceptions import QueueItemNotFoundError, UnsupportedSyncItemError

logger = logging.getLogger(__name__)


def validate_item_kind(action: str, entity_type: str) -> None:
    """
    Raises:
        UnsupportedSyncItemError: If the action or entity type is unknown
    """
    if action not in SyncAction.values:
        raise UnsupportedSyncItemError(f"Unknown sync action: {action}")
    if entity_type not in SyncEntity.values:
        raise UnsupportedSyncItemError(f"Unknown entity type: {entity_type}")


def enqueue(*, user, action: str, entity_type: str, entity_id: str, data: dict = None) -> SyncQueueItem:
    """
    Add a pending write to the user's queue.

    Args:
        user: Owner of the write
        action: create, update, upsert or delete
        entity_type: settings, invoice or invoice_item
        entity_id: Id of the entity on the client
        data: Entity payload

    Returns:
        Created SyncQueueItem
    """
    validate_item_kind(action, entity_type)
    item = SyncQueueItem.objects.create(
        user=user,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        data=data or {},
    )
    logger.debug("Queued %s %s for user %s", entity_type, action, str(user.id)[:8])
    return item


@transaction.atomic
def dequeue(*, user) -> Optional[SyncQueueItem]:
    """Remove and return the oldest queued item, or None when the queue is empty."""
    item = (
        SyncQueueItem.objects
        .select_for_update()
        .filter(user=user)
        .order_by('timestamp')
        .first()
    )
    if item is None:
        return None

    SyncQueueItem.objects.filter(id=item.id).delete()
    return item


def get_all(*, user) -> list:
    return list(SyncQueueItem.objects.filter(user=user).order_by('timestamp'))


def update_retry(*, item: SyncQueueItem, error: str) -> None:
    """Count a failed attempt and keep its error message."""
    SyncQueueItem.objects.filter(id=item.id).update(
        retry_count=F('retry_count') + 1,
        last_error=error,
    )


def remove(*, user, item_id: UUID) -> None:
    """
    Raises:
        QueueItemNotFoundError: If the item is not in the user's queue
    """
    deleted, _ = SyncQueueItem.objects.filter(id=item_id, user=user).delete()
    if not deleted:
        raise QueueItemNotFoundError(f"Queue item with ID {item_id} not found")


def clear(*, user) -> int:
    """Empty the user's queue; returns the number of removed items."""
    deleted, _ = SyncQueueItem.objects.filter(user=user).delete()
    if deleted:
        logger.info("Cleared %d queued items for user %s", deleted, str(user.id)[:8])
    return deleted


def get_count(*, user) -> int:
    return SyncQueueItem.objects.filter(user=user).count()
