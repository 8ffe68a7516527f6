"""Domain-specific exceptions for sync services."""


class SyncServiceError(Exception):
    """Base exception for sync services."""
    pass


class QueueItemNotFoundError(SyncServiceError):
    """Raised when a queued item does not exist for the user."""
    pass


class UnsupportedSyncItemError(SyncServiceError):
    """Raised when an action or entity type cannot be replayed."""
    pass


class SyncTransportError(SyncServiceError):
    """Raised when the remote side rejects or cannot receive an item."""
    pass
