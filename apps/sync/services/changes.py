"""
Change feed.

Model signals record every write to invoices, stores and customers as a
``ChangeEvent``. Clients poll ``changes_since`` and fold the events into the
records they hold with ``merge_changes``.
"""

import logging
from datetime import datetime

from apps.sync.models import ChangeEvent, ChangeEventType

logger = logging.getLogger(__name__)

TRACKED_TABLES = ('invoices', 'stores', 'customers')


def model_payload(instance) -> dict:
    """Column values of a model instance, keyed by column attribute name."""
    return {field.attname: getattr(instance, field.attname) for field in instance._meta.concrete_fields}


def record_change(*, user_id, table: str, event: str, record_id, payload: dict = None) -> ChangeEvent:
    return ChangeEvent.objects.create(
        user_id=user_id,
        table=table,
        event=event,
        record_id=str(record_id),
        payload=payload or {},
    )


def changes_since(*, user, since: datetime = None, tables=None):
    """
    The user's change events after ``since``, oldest first.

    Args:
        user: Owner of the changes
        since: Exclusive lower bound; all events when None
        tables: Optional iterable of table names to keep
    """
    queryset = ChangeEvent.objects.filter(user=user)
    if since is not None:
        queryset = queryset.filter(created_at__gt=since)
    if tables:
        queryset = queryset.filter(table__in=list(tables))
    return queryset.order_by('id')


def merge_changes(records: list, events: list) -> list:
    """
    Apply change events to a list of records, in order.

    Records are dicts with an ``id``. Events carry ``event``, ``record_id``
    and the new row as ``payload``. An INSERT for a record already present
    and a DELETE for a missing one change nothing; an UPDATE for a missing
    record adds it.

    Returns:
        A new list; the input records are not modified
    """
    merged = [dict(record) for record in records]

    for change in events:
        record_id = str(change['record_id'])
        index = next(
            (i for i, record in enumerate(merged) if str(record.get('id')) == record_id),
            None,
        )
        payload = dict(change.get('payload') or {})
        payload.setdefault('id', change['record_id'])
        kind = change['event']

        if kind == ChangeEventType.INSERT:
            if index is None:
                merged.append(payload)
        elif kind == ChangeEventType.UPDATE:
            if index is None:
                merged.append(payload)
            else:
                merged[index] = payload
        elif kind == ChangeEventType.DELETE:
            if index is not None:
                merged.pop(index)
        else:
            logger.warning("Skipping unknown change event %s", kind)

    return merged
