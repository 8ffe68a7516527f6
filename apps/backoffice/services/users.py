"""
User administration.

Tier changes go through the subscriptions services so an admin upgrade
behaves exactly like a paid one.
"""

import logging
from uuid import UUID

from django.db.models import Count, Q

from apps.accounts.models import User
from apps.stores.models import Store
from apps.subscriptions.models import PaymentTransaction, SubscriptionTier
from apps.subscriptions.services import (
    downgrade_to_free,
    extend_subscription,
    get_or_create_subscription,
    reset_invoice_counter,
    upgrade_to_tier,
)

from .exceptions import InvalidFilterError, RecordNotFoundError

logger = logging.getLogger(__name__)


def _get_user(user_id: UUID) -> User:
    try:
        return User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise RecordNotFoundError(f"User with ID {user_id} not found")


def list_users(*, search: str = None, tier: str = None):
    """
    All users, newest first, with store and invoice counts.

    Args:
        search: Case-insensitive match on email or display name
        tier: Only users on this tier; users without a subscription are free
    """
    queryset = (
        User.objects
        .select_related('subscription')
        .annotate(
            store_count=Count('stores', distinct=True),
            invoice_count=Count('invoices', distinct=True),
        )
        .order_by('-created_at')
    )

    if search:
        queryset = queryset.filter(Q(email__icontains=search) | Q(display_name__icontains=search))

    if tier:
        if tier not in SubscriptionTier.values:
            raise InvalidFilterError(f"Invalid tier: {tier}")
        if tier == SubscriptionTier.FREE:
            queryset = queryset.filter(Q(subscription__tier=tier) | Q(subscription__isnull=True))
        else:
            queryset = queryset.filter(subscription__tier=tier)

    return queryset


def get_user_detail(*, user_id: UUID) -> dict:
    """User with their subscription, stores and ten latest payments."""
    user = _get_user(user_id)
    return {
        'user': user,
        'subscription': get_or_create_subscription(user=user),
        'stores': list(Store.objects.filter(user=user).order_by('created_at')),
        'recent_transactions': list(
            PaymentTransaction.objects.filter(user=user).order_by('-created_at')[:10]
        ),
    }


def upgrade_user(*, user_id: UUID, tier: str = SubscriptionTier.PREMIUM):
    subscription = upgrade_to_tier(user=_get_user(user_id), tier=tier)
    logger.info("Admin upgraded user %s to %s", str(user_id)[:8], tier)
    return subscription


def downgrade_user(*, user_id: UUID):
    subscription = downgrade_to_free(user=_get_user(user_id))
    logger.info("Admin downgraded user %s", str(user_id)[:8])
    return subscription


def extend_user_subscription(*, user_id: UUID, days: int):
    subscription = extend_subscription(user=_get_user(user_id), days=days)
    logger.info("Admin extended user %s by %d days", str(user_id)[:8], days)
    return subscription


def reset_user_counter(*, user_id: UUID):
    return reset_invoice_counter(user=_get_user(user_id))
