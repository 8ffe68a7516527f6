"""Domain-specific exceptions for invoices services."""


class InvoicesServiceError(Exception):
    """Base exception for invoices services."""
    pass


class InvoiceNotFoundError(InvoicesServiceError):
    """Raised when an invoice does not exist for the user."""
    pass


class InvalidInvoiceDataError(InvoicesServiceError):
    """Raised when invoice or item data fails validation."""
    pass


class DuplicateInvoiceNumberError(InvoicesServiceError):
    """Raised when the user already has an invoice with this number."""
    pass


class InvalidExportQualityError(InvoicesServiceError):
    """Raised when an export quality preset does not exist."""
    pass


class InvalidReportPeriodError(InvoicesServiceError):
    """Raised when a report month is not in YYYY-MM format."""
    pass
