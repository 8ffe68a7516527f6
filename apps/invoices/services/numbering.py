"""Invoice numbers and per-store daily sequence."""

import secrets
from datetime import date

from django.utils import timezone

from apps.invoices.models import Invoice


def generate_invoice_number(user_id, on_date: date = None) -> str:
    """
    ``INV-DDMMYY-{first UUID section}-{NNN}`` with a random 001..999 counter.

    Collisions are possible; callers check uniqueness per user.
    """
    on_date = on_date or timezone.localdate()
    user_part = str(user_id).split('-')[0].upper()
    counter = secrets.randbelow(999) + 1
    return f"INV-{on_date:%d%m%y}-{user_part}-{counter:03d}"


def get_next_invoice_sequence(*, store, invoice_date: date) -> int:
    """Number of the store's invoices on that date, plus one."""
    return Invoice.objects.filter(store=store, invoice_date=invoice_date).count() + 1
