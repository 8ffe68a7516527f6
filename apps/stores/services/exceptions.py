"""Domain-specific exceptions for stores services."""


class StoresServiceError(Exception):
    """Base exception for stores services."""
    pass


class StoreNotFoundError(StoresServiceError):
    """Raised when a store does not exist or is inactive."""
    pass


class StoreAccessDenied(StoresServiceError):
    """Raised when a store belongs to another user."""
    pass


class ContactNotFoundError(StoresServiceError):
    """Raised when a store contact does not exist."""
    pass


class InvalidPreferenceError(StoresServiceError):
    """Raised when a preference value is not allowed for the user."""
    pass


class InvalidStoreDataError(StoresServiceError):
    """Raised when store fields fail model validation."""
    pass
