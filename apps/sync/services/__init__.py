"""
Sync app services layer.

Offline write queue, replay through a transport, post-signup import and the
change feed.
"""

from .exceptions import (
    SyncServiceError,
    QueueItemNotFoundError,
    UnsupportedSyncItemError,
    SyncTransportError,
)

from .queue import (
    enqueue,
    dequeue,
    get_all,
    update_retry,
    remove,
    clear,
    get_count,
)

from .replay import (
    REPLAY_ERRORS,
    apply_item,
    apply_settings,
    sync_local_data,
)

from .transports import (
    LocalTransport,
    RemoteTransport,
    get_transport,
)

from .sync_service import (
    MAX_RETRIES,
    BASE_RETRY_DELAY,
    SyncService,
    get_sync_service,
    release_sync_service,
)

from .changes import (
    TRACKED_TABLES,
    model_payload,
    record_change,
    changes_since,
    merge_changes,
)


__all__ = [
    # Exceptions
    'SyncServiceError',
    'QueueItemNotFoundError',
    'UnsupportedSyncItemError',
    'SyncTransportError',

    # Queue
    'enqueue',
    'dequeue',
    'get_all',
    'update_retry',
    'remove',
    'clear',
    'get_count',

    # Replay
    'REPLAY_ERRORS',
    'apply_item',
    'apply_settings',
    'sync_local_data',

    # Transports
    'LocalTransport',
    'RemoteTransport',
    'get_transport',

    # Sync Service
    'MAX_RETRIES',
    'BASE_RETRY_DELAY',
    'SyncService',
    'get_sync_service',
    'release_sync_service',

    # Change Feed
    'TRACKED_TABLES',
    'model_payload',
    'record_change',
    'changes_since',
    'merge_changes',
]
