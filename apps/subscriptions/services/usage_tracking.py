"""Per-cycle invoice usage history."""

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..models import InvoiceUsage
from .subscription_management import (
    get_billing_cycle_id,
    get_or_create_subscription,
)


def current_cycle_id(*, user) -> str:
    subscription = get_or_create_subscription(user=user)
    return get_billing_cycle_id(timezone.localdate(subscription.subscription_start_date))


def get_usage(*, user, month_year: str = None) -> int:
    """Invoices counted for a cycle, the current one by default."""
    month_year = month_year or current_cycle_id(user=user)
    usage = InvoiceUsage.objects.filter(user=user, month_year=month_year).first()
    return usage.invoice_count if usage else 0


@transaction.atomic
def increment_usage(*, user, month_year: str = None) -> InvoiceUsage:
    month_year = month_year or current_cycle_id(user=user)
    usage, _ = InvoiceUsage.objects.select_for_update().get_or_create(
        user=user,
        month_year=month_year,
    )
    InvoiceUsage.objects.filter(pk=usage.pk).update(invoice_count=F('invoice_count') + 1)
    usage.refresh_from_db()
    return usage


def get_usage_history(*, user, limit: int = 12):
    return InvoiceUsage.objects.filter(user=user).order_by('-month_year')[:limit]
