"""
Invoice administration across all users.
"""

import logging
from datetime import date
from uuid import UUID

from django.db.models import Q
from django.utils import timezone

from apps.invoices.models import Invoice, InvoiceStatus

from .exceptions import InvalidFilterError, RecordNotFoundError

logger = logging.getLogger(__name__)


def list_all_invoices(*, search: str = None, status: str = None, user_id: UUID = None,
                      date_from: date = None, date_to: date = None):
    """
    Invoices of every user, newest first.

    Args:
        search: Case-insensitive match on invoice number or customer name
        status: draft, pending or synced
        user_id: Only this owner's invoices
        date_from: Inclusive lower bound on the invoice date
        date_to: Inclusive upper bound on the invoice date
    """
    queryset = Invoice.objects.select_related('user', 'store').order_by('-created_at')

    if search:
        queryset = queryset.filter(
            Q(invoice_number__icontains=search) | Q(customer_name__icontains=search)
        )
    if status:
        if status not in InvoiceStatus.values:
            raise InvalidFilterError(f"Invalid status: {status}")
        queryset = queryset.filter(status=status)
    if user_id:
        queryset = queryset.filter(user_id=user_id)
    if date_from:
        queryset = queryset.filter(invoice_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(invoice_date__lte=date_to)

    return queryset


def get_invoice_detail(*, invoice_id: UUID) -> Invoice:
    try:
        return (
            Invoice.objects
            .select_related('user', 'store')
            .prefetch_related('items')
            .get(id=invoice_id)
        )
    except Invoice.DoesNotExist:
        raise RecordNotFoundError(f"Invoice with ID {invoice_id} not found")


def delete_invoice_admin(*, invoice_id: UUID) -> None:
    invoice = get_invoice_detail(invoice_id=invoice_id)
    invoice.delete()
    logger.info("Admin deleted invoice %s", str(invoice_id)[:8])


def update_invoice_status(*, invoice_id: UUID, status: str) -> Invoice:
    """
    Raises:
        InvalidFilterError: If the status is unknown
        RecordNotFoundError: If the invoice does not exist
    """
    if status not in InvoiceStatus.values:
        raise InvalidFilterError(f"Invalid status: {status}")

    invoice = get_invoice_detail(invoice_id=invoice_id)
    invoice.status = status
    update_fields = ['status', 'updated_at']
    if status == InvoiceStatus.SYNCED and invoice.synced_at is None:
        invoice.synced_at = timezone.now()
        update_fields.append('synced_at')
    invoice.save(update_fields=update_fields)
    return invoice
