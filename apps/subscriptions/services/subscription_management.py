"""
Subscription lifecycle and monthly invoice quota.

Billing cycles are anchored on the day of month the subscription started:
a subscription started on the 15th counts invoices from the 15th of one
month to the 14th of the next. The cycle id ``YYYY-MM-DD`` is the cycle's
first day and is stored in ``UserSubscription.month_year``.
"""

import calendar
import logging
from datetime import date, timedelta

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..exceptions import InvoiceLimitExceeded
from ..models import InvoiceUsage, SubscriptionTier, UserSubscription
from ..pricing import TIER_DURATION_DAYS, TIER_LIMITS
from .exceptions import InvalidExtensionError, InvalidTierError

logger = logging.getLogger(__name__)


# =============================================================================
# Billing cycle arithmetic
# =============================================================================

def _anchor(year: int, month: int, start_day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start_day, last_day))


def _shift_month(year: int, month: int, delta: int) -> tuple:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def get_cycle_start(start_date: date, today: date) -> date:
    """First day of the billing cycle containing ``today``."""
    this_month = _anchor(today.year, today.month, start_date.day)
    if today >= this_month:
        return this_month
    year, month = _shift_month(today.year, today.month, -1)
    return _anchor(year, month, start_date.day)


def get_billing_cycle_id(start_date: date, today: date = None) -> str:
    """
    Cycle id ``YYYY-MM-DD`` for the cycle containing ``today``.

    Args:
        start_date: Date the subscription started (only its day is used)
        today: Reference date, defaults to the local date

    Returns:
        ISO date of the cycle's first day
    """
    today = today or timezone.localdate()
    return get_cycle_start(start_date, today).isoformat()


def get_next_reset_date(start_date: date, today: date = None) -> date:
    """First day of the cycle after the one containing ``today``."""
    today = today or timezone.localdate()
    current = get_cycle_start(start_date, today)
    year, month = _shift_month(current.year, current.month, 1)
    return _anchor(year, month, start_date.day)


def _local_start_date(subscription) -> date:
    return timezone.localdate(subscription.subscription_start_date)


# =============================================================================
# Subscription rows
# =============================================================================

@transaction.atomic
def get_or_create_subscription(*, user) -> UserSubscription:
    """
    Return the user's subscription, creating a free one when missing.

    Args:
        user: User instance

    Returns:
        UserSubscription instance
    """
    now = timezone.now()
    subscription, created = UserSubscription.objects.get_or_create(
        user=user,
        defaults={
            'tier': SubscriptionTier.FREE,
            'invoice_limit': TIER_LIMITS[SubscriptionTier.FREE],
            'current_month_count': 0,
            'subscription_start_date': now,
            'month_year': get_billing_cycle_id(timezone.localdate(now)),
        },
    )
    if created:
        logger.info("Created free subscription for user %s", str(user.id)[:8])
    return subscription


def _locked_subscription(user) -> UserSubscription:
    get_or_create_subscription(user=user)
    return UserSubscription.objects.select_for_update().get(user=user)


def _refresh_cycle(subscription, today=None) -> UserSubscription:
    """Reset the counter when the stored cycle is not the current one."""
    cycle_id = get_billing_cycle_id(_local_start_date(subscription), today)
    if subscription.month_year != cycle_id:
        subscription.month_year = cycle_id
        subscription.current_month_count = 0
        subscription.save(update_fields=['month_year', 'current_month_count', 'updated_at'])
    return subscription


def _effective_limit(subscription) -> int:
    # An expired premium row keeps its numbers but only grants the free quota
    if subscription.tier == SubscriptionTier.PREMIUM and subscription.is_expired():
        return TIER_LIMITS[SubscriptionTier.FREE]
    return subscription.invoice_limit


@transaction.atomic
def upgrade_to_tier(*, user, tier: str) -> UserSubscription:
    """
    Apply a paid tier to a user.

    An active paid subscription is extended by the tier duration and the
    unused invoices of the current cycle carry over. Otherwise a new period
    starts now.

    Args:
        user: User instance
        tier: Tier name, must be a paid tier

    Returns:
        Updated UserSubscription

    Raises:
        InvalidTierError: If the tier is unknown or free
    """
    if tier not in TIER_LIMITS or TIER_DURATION_DAYS.get(tier, 0) <= 0:
        raise InvalidTierError(f"Invalid tier: {tier}")

    subscription = _locked_subscription(user)
    now = timezone.now()
    duration = timedelta(days=TIER_DURATION_DAYS[tier])
    tier_limit = TIER_LIMITS[tier]

    is_active_paid = (
        subscription.tier != SubscriptionTier.FREE
        and subscription.subscription_end_date is not None
        and subscription.subscription_end_date > now
    )

    if is_active_paid:
        _refresh_cycle(subscription)
        remaining = max(subscription.invoice_limit - subscription.current_month_count, 0)
        subscription.subscription_end_date = subscription.subscription_end_date + duration
        subscription.invoice_limit = remaining + tier_limit
    else:
        subscription.subscription_start_date = now
        subscription.subscription_end_date = now + duration
        subscription.invoice_limit = tier_limit
        subscription.month_year = get_billing_cycle_id(timezone.localdate(now))

    subscription.tier = tier
    subscription.current_month_count = 0
    subscription.save()

    logger.info("Upgraded user %s to %s", str(user.id)[:8], tier)
    return subscription


@transaction.atomic
def downgrade_to_free(*, user) -> UserSubscription:
    subscription = _locked_subscription(user)
    subscription.tier = SubscriptionTier.FREE
    subscription.invoice_limit = TIER_LIMITS[SubscriptionTier.FREE]
    subscription.subscription_end_date = None
    subscription.save(update_fields=['tier', 'invoice_limit', 'subscription_end_date', 'updated_at'])
    return subscription


@transaction.atomic
def extend_subscription(*, user, days: int) -> UserSubscription:
    """
    Push the end date out by ``days``, counted from now when already past.

    Raises:
        InvalidExtensionError: If days is not positive
    """
    if days <= 0:
        raise InvalidExtensionError("Days must be a positive number")

    subscription = _locked_subscription(user)
    now = timezone.now()
    base = subscription.subscription_end_date or now
    if base < now:
        base = now
    subscription.subscription_end_date = base + timedelta(days=days)
    subscription.save(update_fields=['subscription_end_date', 'updated_at'])
    return subscription


@transaction.atomic
def reset_invoice_counter(*, user) -> UserSubscription:
    subscription = _locked_subscription(user)
    subscription.current_month_count = 0
    subscription.save(update_fields=['current_month_count', 'updated_at'])
    return subscription


# =============================================================================
# Quota
# =============================================================================

@transaction.atomic
def get_remaining_invoices(*, user) -> int:
    subscription = _refresh_cycle(_locked_subscription(user))
    return max(_effective_limit(subscription) - subscription.current_month_count, 0)


def can_generate_invoice(*, user) -> bool:
    return get_remaining_invoices(user=user) > 0


def check_invoice_limit(*, user) -> None:
    """Raise InvoiceLimitExceeded (HTTP 403) when the quota is used up."""
    if not can_generate_invoice(user=user):
        raise InvoiceLimitExceeded()


@transaction.atomic
def increment_invoice_count(*, user) -> UserSubscription:
    """
    Count one generated invoice against the current cycle.

    The per-cycle ``InvoiceUsage`` row is incremented in the same
    transaction.
    """
    subscription = _refresh_cycle(_locked_subscription(user))
    UserSubscription.objects.filter(pk=subscription.pk).update(
        current_month_count=F('current_month_count') + 1
    )
    usage, _ = InvoiceUsage.objects.get_or_create(
        user=user,
        month_year=subscription.month_year,
    )
    InvoiceUsage.objects.filter(pk=usage.pk).update(invoice_count=F('invoice_count') + 1)

    subscription.refresh_from_db()
    return subscription


@transaction.atomic
def get_subscription_status(*, user) -> dict:
    """
    Summary of tier and quota for dashboards.

    ``reset_date`` is the end of the paid period for paid tiers, otherwise
    the first day of the next billing cycle.
    """
    from .tiers import get_user_tier

    subscription = _refresh_cycle(_locked_subscription(user))
    tier = get_user_tier(user=user)
    limit = _effective_limit(subscription)

    if tier != SubscriptionTier.FREE and subscription.subscription_end_date:
        reset_date = subscription.subscription_end_date
    else:
        reset_date = get_next_reset_date(_local_start_date(subscription))

    return {
        'tier': tier,
        'invoice_limit': limit,
        'current_month_count': subscription.current_month_count,
        'remaining_invoices': max(limit - subscription.current_month_count, 0),
        'month_year': subscription.month_year,
        'reset_date': reset_date,
        'subscription_start_date': subscription.subscription_start_date,
        'subscription_end_date': subscription.subscription_end_date,
        'is_premium': tier == SubscriptionTier.PREMIUM,
    }
