"""
Store-based invoice numbers.

Format: ``{prefix}-{store_code}-{DDMMYY}-{counter}`` with the counter
zero-padded; the store code part is left out when the store has none.
"""

from datetime import date

from django.db import transaction

from apps.stores.models import Store


def format_store_invoice_number(store: Store, invoice_date: date, counter: int) -> str:
    parts = [store.invoice_prefix or 'INV']
    if store.store_code:
        parts.append(store.store_code)
    parts.append(invoice_date.strftime('%d%m%y'))
    parts.append(str(counter).zfill(store.invoice_number_padding))
    return '-'.join(parts)


@transaction.atomic
def next_store_invoice_number(*, store: Store, invoice_date: date) -> str:
    """
    Consume the next number of a store's counter.

    With ``reset_counter_daily`` the daily counter restarts at 1 whenever the
    invoice date changes; otherwise the running ``next_invoice_number`` is used.
    """
    locked = Store.objects.select_for_update().get(pk=store.pk)

    if locked.reset_counter_daily:
        if locked.daily_invoice_date != invoice_date:
            locked.daily_invoice_date = invoice_date
            locked.daily_invoice_counter = 1
        counter = locked.daily_invoice_counter
        locked.daily_invoice_counter = counter + 1
        locked.save(update_fields=['daily_invoice_date', 'daily_invoice_counter', 'updated_at'])
    else:
        counter = locked.next_invoice_number
        locked.next_invoice_number = counter + 1
        locked.save(update_fields=['next_invoice_number', 'updated_at'])

    return format_store_invoice_number(locked, invoice_date, counter)


@transaction.atomic
def reset_invoice_counter(*, store: Store) -> Store:
    locked = Store.objects.select_for_update().get(pk=store.pk)
    locked.next_invoice_number = 1
    locked.daily_invoice_counter = 1
    locked.save(update_fields=['next_invoice_number', 'daily_invoice_counter', 'updated_at'])
    return locked
