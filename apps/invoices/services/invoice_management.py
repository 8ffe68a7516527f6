"""
Invoice management service.

Creating an invoice counts against the monthly quota of the user's tier.
Totals are always recomputed on the server from the items.
"""

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from apps.customers.models import Customer
from apps.invoices.models import Invoice, InvoiceItem, InvoiceStatus
from apps.stores.services import (
    get_default_store,
    get_or_create_preferences,
    get_store,
    next_store_invoice_number,
)
from apps.subscriptions.models import HistoryType
from apps.subscriptions.services import (
    check_invoice_limit,
    get_history_limit,
    increment_invoice_count,
)

from .calculations import calculate_item_subtotal, calculate_subtotal, calculate_total, to_decimal
from .exceptions import DuplicateInvoiceNumberError, InvalidInvoiceDataError, InvoiceNotFoundError
from .numbering import generate_invoice_number

logger = logging.getLogger(__name__)

# Plain fields copied from request data onto the invoice
INVOICE_FIELDS = (
    'customer_name', 'customer_email', 'customer_phone', 'customer_address',
    'customer_status', 'note', 'status',
)

MAX_NUMBER_ATTEMPTS = 5

# Store counters can lag behind used numbers after a reset
MAX_STORE_NUMBER_ATTEMPTS = 100


# =============================================================================
# Helpers
# =============================================================================

def _parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value)[:10]) if value else None
    if parsed is None:
        raise InvalidInvoiceDataError(f"Invalid invoice date: {value!r}")
    return parsed


def _validate_item(item: dict, index: int) -> None:
    label = f"Item {index + 1}"
    if not str(item.get('description') or '').strip():
        raise InvalidInvoiceDataError(f"{label}: description is required")

    try:
        quantity = to_decimal(item.get('quantity') or (1 if item.get('is_buyback') else None))
        if quantity <= 0:
            raise InvalidInvoiceDataError(f"{label}: quantity must be greater than 0")
        if quantity != quantity.to_integral_value():
            raise InvalidInvoiceDataError(f"{label}: quantity must be a whole number")

        if item.get('is_buyback'):
            if to_decimal(item.get('gram')) <= 0:
                raise InvalidInvoiceDataError(f"{label}: gram must be greater than 0")
            rate = item.get('custom_buyback_rate')
            if rate is None or rate == '':
                rate = item.get('buyback_rate')
            if rate is None or rate == '' or to_decimal(rate) < 0:
                raise InvalidInvoiceDataError(f"{label}: buyback rate must be 0 or more")
        else:
            if to_decimal(item.get('price')) < 0:
                raise InvalidInvoiceDataError(f"{label}: price must be 0 or more")
    except ValueError as e:
        raise InvalidInvoiceDataError(f"{label}: {e}")


def _replace_items(invoice: Invoice, items: list) -> list:
    """Delete the invoice's items and store ``items`` in their place."""
    for index, item in enumerate(items):
        _validate_item(item, index)

    invoice.items.all().delete()
    rows = []
    for index, item in enumerate(items):
        is_buyback = bool(item.get('is_buyback'))
        rows.append(InvoiceItem(
            invoice=invoice,
            description=str(item['description']).strip(),
            quantity=int(to_decimal(item.get('quantity') or 1)),
            price=to_decimal(item.get('price')),
            subtotal=calculate_item_subtotal(item),
            position=index if item.get('position') is None else item['position'],
            is_buyback=is_buyback,
            gram=to_decimal(item['gram']) if is_buyback else None,
            buyback_rate=item.get('buyback_rate') if is_buyback else None,
            custom_buyback_rate=(item.get('custom_buyback_rate') or None) if is_buyback else None,
        ))
    return InvoiceItem.objects.bulk_create(rows)


def _resolve_tax(user, data: dict, invoice: Invoice = None) -> tuple:
    """``(enabled, percentage)`` from the request, the invoice or the user's preferences."""
    if invoice is not None:
        enabled = invoice.tax_percentage > 0
        percentage = invoice.tax_percentage
    else:
        preferences = get_or_create_preferences(user=user)
        enabled = preferences.tax_enabled
        percentage = preferences.tax_percentage

    if data.get('tax_enabled') is not None:
        enabled = bool(data['tax_enabled'])
    if data.get('tax_percentage') is not None:
        percentage = to_decimal(data['tax_percentage'])

    if not 0 <= percentage <= 100:
        raise InvalidInvoiceDataError("Tax percentage must be between 0 and 100")
    return enabled, percentage


def _apply_totals(invoice: Invoice, user, data: dict, existing: bool) -> Invoice:
    try:
        enabled, percentage = _resolve_tax(user, data, invoice if existing else None)
        shipping_cost = data.get('shipping_cost')
        if shipping_cost is None:
            shipping_cost = invoice.shipping_cost
        if to_decimal(shipping_cost) < 0:
            raise InvalidInvoiceDataError("Shipping cost must be 0 or more")

        totals = calculate_total(
            calculate_subtotal(invoice.items.all()),
            shipping_cost,
            enabled,
            percentage,
        )
    except ValueError as e:
        raise InvalidInvoiceDataError(str(e))

    invoice.subtotal = totals['subtotal']
    invoice.shipping_cost = totals['shipping_cost']
    invoice.tax_amount = totals['tax_amount']
    invoice.total = totals['total']
    invoice.tax_percentage = percentage if enabled else 0
    invoice.save()
    return invoice


def _resolve_store(user, store_id):
    if store_id:
        return get_store(store_id=store_id, user=user)
    return get_default_store(user=user)


def _resolve_customer(user, customer_id) -> Optional[Customer]:
    if not customer_id:
        return None
    customer = Customer.objects.filter(id=customer_id, store__user=user).first()
    if customer is None:
        raise InvalidInvoiceDataError(f"Customer with ID {customer_id} not found")
    return customer


def _customer_snapshot(customer: Optional[Customer]) -> dict:
    if customer is None:
        return {}
    return {
        'customer_name': customer.name,
        'customer_email': customer.email,
        'customer_phone': customer.phone,
        'customer_address': customer.address,
        'customer_status': customer.status,
    }


def _number_taken(user, number: str) -> bool:
    return Invoice.objects.filter(user=user, invoice_number=number).exists()


def _new_invoice_number(user, store, invoice_date: date) -> str:
    if store is not None:
        for _ in range(MAX_STORE_NUMBER_ATTEMPTS):
            number = next_store_invoice_number(store=store, invoice_date=invoice_date)
            if not _number_taken(user, number):
                return number
        raise DuplicateInvoiceNumberError("Could not find a free number on the store counter")

    for _ in range(MAX_NUMBER_ATTEMPTS):
        number = generate_invoice_number(user.id, invoice_date)
        if not _number_taken(user, number):
            return number
    raise DuplicateInvoiceNumberError("Could not generate a unique invoice number")


def _check_number_free(user, number: str, exclude_id=None) -> None:
    queryset = Invoice.objects.filter(user=user, invoice_number=number)
    if exclude_id is not None:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise DuplicateInvoiceNumberError(f"Invoice number {number} already exists")


# =============================================================================
# Operations
# =============================================================================

@transaction.atomic
def create_invoice_with_items(*, user, data: dict, items: list) -> Invoice:
    """
    Create an invoice and its items in one transaction.

    Args:
        user: Owner
        data: Invoice fields; ``id``, ``store_id``, ``customer_id``,
            ``invoice_number`` and the tax fields are optional
        items: Item dicts, at least one

    Returns:
        Created Invoice with totals computed

    Raises:
        InvoiceLimitExceeded: If the monthly quota is used up
        InvalidInvoiceDataError: If fields or items are invalid
        DuplicateInvoiceNumberError: If the number is already used
    """
    check_invoice_limit(user=user)

    if not items:
        raise InvalidInvoiceDataError("Invoice must have at least one item")

    invoice_id = data.get('id') or uuid.uuid4()
    if Invoice.objects.filter(id=invoice_id).exists():
        raise InvalidInvoiceDataError(f"Invoice ID {invoice_id} is already in use")

    store = _resolve_store(user, data.get('store_id'))
    invoice_date = _parse_date(data.get('invoice_date') or timezone.localdate())

    invoice_number = data.get('invoice_number') or _new_invoice_number(user, store, invoice_date)
    _check_number_free(user, invoice_number)

    customer = _resolve_customer(user, data.get('customer_id'))
    fields = _customer_snapshot(customer)
    fields.update({key: data[key] for key in INVOICE_FIELDS if data.get(key) is not None})

    if not str(fields.get('customer_name') or '').strip():
        raise InvalidInvoiceDataError("Customer name is required")

    fields.setdefault('status', InvoiceStatus.SYNCED)
    invoice = Invoice(
        id=invoice_id,
        user=user,
        store=store,
        customer=customer,
        invoice_number=invoice_number,
        invoice_date=invoice_date,
        synced_at=timezone.now() if fields['status'] == InvoiceStatus.SYNCED else None,
        **fields
    )
    invoice.save(force_insert=True)

    _replace_items(invoice, items)
    _apply_totals(invoice, user, data, existing=False)
    increment_invoice_count(user=user)

    logger.info("Created invoice %s for user %s", str(invoice.id)[:8], str(user.id)[:8])
    return invoice


@transaction.atomic
def update_invoice(*, user, invoice_id: UUID, data: dict, items: list = None) -> Invoice:
    """
    Update invoice fields; ``items`` replaces all items when given.

    Totals are recomputed either way.
    """
    try:
        invoice = Invoice.objects.select_for_update().get(id=invoice_id, user=user)
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice with ID {invoice_id} not found")

    number = data.get('invoice_number')
    if number and number != invoice.invoice_number:
        _check_number_free(user, number, exclude_id=invoice.id)
        invoice.invoice_number = number

    if 'store_id' in data:
        invoice.store = get_store(store_id=data['store_id'], user=user) if data['store_id'] else None

    if 'customer_id' in data:
        invoice.customer = _resolve_customer(user, data['customer_id'])

    if data.get('invoice_date'):
        invoice.invoice_date = _parse_date(data['invoice_date'])

    previous_status = invoice.status
    for key in INVOICE_FIELDS:
        if key in data:
            setattr(invoice, key, data[key])

    if not str(invoice.customer_name or '').strip():
        raise InvalidInvoiceDataError("Customer name is required")

    if invoice.status == InvoiceStatus.SYNCED and previous_status != InvoiceStatus.SYNCED:
        invoice.synced_at = timezone.now()

    if items is not None:
        if not items:
            raise InvalidInvoiceDataError("Invoice must have at least one item")
        _replace_items(invoice, items)

    return _apply_totals(invoice, user, data, existing=True)


@transaction.atomic
def delete_invoice(*, user, invoice_id: UUID) -> None:
    deleted, _ = Invoice.objects.filter(id=invoice_id, user=user).delete()
    if not deleted:
        raise InvoiceNotFoundError(f"Invoice with ID {invoice_id} not found")
    logger.info("Deleted invoice %s", str(invoice_id)[:8])


@transaction.atomic
def upsert_invoice_with_items(*, user, data: dict, items: list) -> tuple:
    """
    Update the invoice matching ``data['id']`` or ``data['invoice_number']``,
    or create it.

    Only creation counts against the invoice quota.

    Returns:
        tuple: (Invoice, created)
    """
    existing = None
    if data.get('id'):
        existing = Invoice.objects.filter(id=data['id'], user=user).first()
    if existing is None and data.get('invoice_number'):
        existing = Invoice.objects.filter(user=user, invoice_number=data['invoice_number']).first()

    if existing is not None:
        fields = {key: value for key, value in data.items() if key != 'id'}
        return update_invoice(user=user, invoice_id=existing.id, data=fields, items=items), False

    return create_invoice_with_items(user=user, data=data, items=items), True


def get_invoice(*, invoice_id: UUID, user) -> Invoice:
    """
    Raises:
        InvoiceNotFoundError: If the invoice doesn't exist for the user
    """
    try:
        return (
            Invoice.objects
            .select_related('store', 'customer')
            .prefetch_related('items')
            .get(id=invoice_id, user=user)
        )
    except Invoice.DoesNotExist:
        raise InvoiceNotFoundError(f"Invoice with ID {invoice_id} not found")


def list_invoices(*, user, status: str = None, limit: int = None, store_id: UUID = None):
    """User's invoices, newest invoice date first."""
    queryset = (
        Invoice.objects
        .filter(user=user)
        .select_related('store')
        .prefetch_related('items')
        .order_by('-invoice_date', '-created_at')
    )
    if status:
        queryset = queryset.filter(status=status)
    if store_id:
        queryset = queryset.filter(store_id=store_id)
    if limit:
        queryset = queryset[:limit]
    return queryset


def apply_history_limit(*, user, queryset):
    """
    Restrict an invoice queryset to the history window of the user's tier.

    ``count`` tiers see their most recent N invoices, ``days`` tiers the
    invoices dated within the last N days.
    """
    limit, history_type = get_history_limit(user=user)
    queryset = queryset.order_by('-invoice_date', '-created_at')

    if history_type == HistoryType.DAYS:
        cutoff = timezone.localdate() - timedelta(days=limit)
        return queryset.filter(invoice_date__gte=cutoff)

    recent_ids = list(queryset.values_list('id', flat=True)[:limit])
    return queryset.filter(id__in=recent_ids)
