"""
HTTP-facing exceptions for tier gating.

Raised from service code that runs inside DRF views; DRF renders them with
their status code and ``default_code``.
"""
from rest_framework.exceptions import APIException


class FeatureNotAvailable(APIException):
    """The user's tier does not include the requested feature."""
    status_code = 403
    default_detail = 'This feature requires a Premium subscription.'
    default_code = 'premium_required'


class InvoiceLimitExceeded(APIException):
    """The monthly invoice quota of the tier is used up."""
    status_code = 403
    default_detail = 'Monthly invoice limit reached. Upgrade to Premium for more invoices.'
    default_code = 'invoice_limit_reached'
