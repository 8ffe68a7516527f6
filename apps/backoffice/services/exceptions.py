"""Domain-specific exceptions for backoffice services."""


class BackofficeServiceError(Exception):
    """Base exception for backoffice services."""
    pass


class RecordNotFoundError(BackofficeServiceError):
    """Raised when the requested user, store, invoice or plan does not exist."""
    pass


class InvalidFilterError(BackofficeServiceError):
    """Raised when a filter or update value is not accepted."""
    pass
