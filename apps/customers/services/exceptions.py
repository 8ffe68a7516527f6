"""Domain-specific exceptions for customers services."""


class CustomersServiceError(Exception):
    """Base exception for customers services."""
    pass


class CustomerNotFoundError(CustomersServiceError):
    """Raised when a customer does not exist or is inactive."""
    pass
