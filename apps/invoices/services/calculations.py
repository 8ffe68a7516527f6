"""
Money arithmetic for invoices.

All amounts are Decimals rounded half-up to two places.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')


def to_decimal(value) -> Decimal:
    if value is None or value == '':
        return ZERO
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _get(item, key, default=None):
    if isinstance(item, dict):
        return item.get(key, default)
    return getattr(item, key, default)


def calculate_item_subtotal(item) -> Decimal:
    """
    Subtotal of one item, given as a dict or an ``InvoiceItem``.

    Buyback items use gram x rate (custom rate first); others quantity x price.
    """
    if _get(item, 'is_buyback'):
        rate = _get(item, 'custom_buyback_rate')
        if rate is None or rate == '':
            rate = _get(item, 'buyback_rate')
        return round_money(to_decimal(_get(item, 'gram')) * to_decimal(rate))

    return round_money(to_decimal(_get(item, 'quantity', 0)) * to_decimal(_get(item, 'price')))


def calculate_subtotal(items) -> Decimal:
    return round_money(sum((calculate_item_subtotal(item) for item in items), ZERO))


def calculate_total(subtotal, shipping_cost=0, tax_enabled=False, tax_percentage=0) -> dict:
    """
    Invoice totals.

    Args:
        subtotal: Sum of item subtotals
        shipping_cost: Added after tax
        tax_enabled: When False the tax is zero whatever the percentage
        tax_percentage: Percent of the subtotal

    Returns:
        dict with subtotal, shipping_cost, tax_amount and total
    """
    subtotal = round_money(subtotal)
    shipping_cost = round_money(shipping_cost)

    tax_amount = ZERO
    if tax_enabled:
        tax_amount = round_money(subtotal * to_decimal(tax_percentage) / Decimal('100'))

    return {
        'subtotal': subtotal,
        'shipping_cost': shipping_cost,
        'tax_amount': tax_amount,
        'total': round_money(subtotal + shipping_cost + tax_amount),
    }


def format_rupiah(amount) -> str:
    """``Rp 1.250.000``; cents are rounded away."""
    value = to_decimal(amount).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    sign = '-' if value < 0 else ''
    return f"{sign}Rp {abs(int(value)):,}".replace(',', '.')
