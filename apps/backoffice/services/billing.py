"""
Payments, subscriptions and plan administration.
"""

import logging
from datetime import date
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.subscriptions.models import (
    PaymentStatus,
    PaymentTransaction,
    SubscriptionPlan,
    SubscriptionTier,
    UserSubscription,
)

from .exceptions import InvalidFilterError, RecordNotFoundError

logger = logging.getLogger(__name__)

SUBSCRIPTION_STATES = ('active', 'expired')

# Plan fields an admin may change; the tier itself is fixed
PLAN_FIELDS = {
    'name', 'description', 'price', 'billing_period', 'invoice_limit', 'duration',
    'features', 'template_count', 'has_logo', 'has_signature', 'has_custom_colors',
    'history_limit', 'history_type', 'has_dashboard_totals', 'export_qualities',
    'has_monthly_report', 'has_customer_book', 'is_active', 'is_popular', 'sort_order',
}


# =============================================================================
# Transactions
# =============================================================================

def list_transactions(*, status: str = None, tier: str = None,
                      date_from: date = None, date_to: date = None):
    """Payment transactions, newest first, filtered on creation date."""
    queryset = PaymentTransaction.objects.select_related('user').order_by('-created_at')

    if status:
        if status not in PaymentStatus.values:
            raise InvalidFilterError(f"Invalid status: {status}")
        queryset = queryset.filter(status=status)
    if tier:
        if tier not in SubscriptionTier.values:
            raise InvalidFilterError(f"Invalid tier: {tier}")
        queryset = queryset.filter(tier=tier)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    return queryset


def verify_transaction(*, transaction_id: UUID) -> PaymentTransaction:
    """Mark a payment as checked by an admin."""
    try:
        payment = PaymentTransaction.objects.get(id=transaction_id)
    except PaymentTransaction.DoesNotExist:
        raise RecordNotFoundError(f"Transaction with ID {transaction_id} not found")

    payment.verified_at = timezone.now()
    payment.save(update_fields=['verified_at', 'updated_at'])
    logger.info("Admin verified transaction %s", str(transaction_id)[:8])
    return payment


# =============================================================================
# Subscriptions
# =============================================================================

def list_subscriptions(*, tier: str = None, state: str = None):
    """
    Subscriptions, most recently changed first.

    Args:
        tier: free or premium
        state: ``active`` (no end date or ending in the future) or ``expired``
    """
    queryset = UserSubscription.objects.select_related('user').order_by('-updated_at')
    now = timezone.now()

    if tier:
        if tier not in SubscriptionTier.values:
            raise InvalidFilterError(f"Invalid tier: {tier}")
        queryset = queryset.filter(tier=tier)

    if state:
        if state not in SUBSCRIPTION_STATES:
            raise InvalidFilterError(f"Invalid state: {state}")
        active = Q(subscription_end_date__isnull=True) | Q(subscription_end_date__gt=now)
        queryset = queryset.filter(active) if state == 'active' else queryset.exclude(active)

    return queryset


# =============================================================================
# Plans
# =============================================================================

def list_plans():
    """Every plan, inactive ones included."""
    return SubscriptionPlan.objects.all().order_by('sort_order', 'price')


@transaction.atomic
def update_plan(*, plan_id: UUID, **fields) -> SubscriptionPlan:
    """
    Partially update a plan; unknown fields are ignored.

    Raises:
        RecordNotFoundError: If the plan does not exist
    """
    try:
        plan = SubscriptionPlan.objects.select_for_update().get(id=plan_id)
    except SubscriptionPlan.DoesNotExist:
        raise RecordNotFoundError(f"Plan with ID {plan_id} not found")

    changed = [key for key in fields if key in PLAN_FIELDS]
    for key in changed:
        setattr(plan, key, fields[key])

    if changed:
        plan.save(update_fields=changed + ['updated_at'])
        logger.info("Admin updated plan %s: %s", plan.tier, ', '.join(sorted(changed)))
    return plan
