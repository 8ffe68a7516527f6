"""
Tier resolution and feature gating.

The effective tier is read from ``UserSubscription``; a premium row whose end
date has passed counts as free. Feature values come from the active
``SubscriptionPlan`` of the tier, falling back to ``pricing.TIER_FEATURES``.
"""

from django.utils import timezone

from ..exceptions import FeatureNotAvailable
from ..models import SubscriptionPlan, SubscriptionTier, UserSubscription
from ..pricing import TIER_FEATURES
from .exceptions import UnknownFeatureError


def get_active_plan(tier):
    return SubscriptionPlan.objects.filter(tier=tier, is_active=True).first()


def get_tier_features(tier: str) -> dict:
    """Feature dict for a tier; unknown tiers get the free matrix."""
    plan = get_active_plan(tier)
    if plan is not None:
        return plan.tier_features()
    features = TIER_FEATURES.get(tier, TIER_FEATURES[SubscriptionTier.FREE])
    return {**features, 'export_qualities': list(features['export_qualities'])}


def get_user_tier(*, user) -> str:
    """
    Return the tier currently in effect for a user.

    Args:
        user: User instance

    Returns:
        'free' or 'premium'
    """
    subscription = UserSubscription.objects.filter(user=user).first()
    if subscription is None:
        return SubscriptionTier.FREE

    if subscription.tier == SubscriptionTier.PREMIUM and subscription.is_expired(timezone.now()):
        return SubscriptionTier.FREE

    return subscription.tier


def get_user_features(*, user) -> dict:
    return get_tier_features(get_user_tier(user=user))


def is_premium(*, user) -> bool:
    return get_user_tier(user=user) == SubscriptionTier.PREMIUM


def can_access_feature(*, user, feature: str) -> bool:
    """
    Check one entry of the feature matrix.

    Booleans are used as-is, numbers must be positive, lists non-empty and
    any other value grants access.

    Raises:
        UnknownFeatureError: If the feature is not in the matrix
    """
    features = get_user_features(user=user)
    if feature not in features:
        raise UnknownFeatureError(f"Unknown feature: {feature}")

    value = features[feature]
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def require_feature(*, user, feature: str, message=None) -> None:
    """Raise FeatureNotAvailable (HTTP 403) unless the feature is granted."""
    if not can_access_feature(user=user, feature=feature):
        raise FeatureNotAvailable(message)


def get_history_limit(*, user) -> tuple:
    """Return ``(limit, history_type)`` for the user's tier."""
    features = get_user_features(user=user)
    return features['history_limit'], features['history_type']


def get_export_qualities(*, user) -> list:
    return get_user_features(user=user)['export_qualities']
