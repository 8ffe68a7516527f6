"""Domain-specific exceptions for subscription and payment services."""


class SubscriptionsServiceError(Exception):
    """Base exception for subscription services."""
    pass


class InvalidTierError(SubscriptionsServiceError):
    """Raised when a tier name is not known."""
    pass


class UnknownFeatureError(SubscriptionsServiceError):
    """Raised when a feature name is not part of the tier matrix."""
    pass


class InvalidExtensionError(SubscriptionsServiceError):
    """Raised when a subscription extension is not a positive number of days."""
    pass


class PaymentError(SubscriptionsServiceError):
    """Base exception for payment provider operations."""
    pass


class PaymentConfigurationError(PaymentError):
    """Raised when provider credentials are missing."""
    pass


class PaymentProviderError(PaymentError):
    """Raised when the provider API fails or answers unexpectedly."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class PaymentNotFoundError(PaymentError):
    """Raised when no payment transaction matches the given id."""
    pass


class InvalidWebhookPayload(PaymentError):
    """Raised when a webhook body lacks the fields needed to process it."""
    pass
