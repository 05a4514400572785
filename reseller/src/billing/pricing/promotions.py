"""
Promotional Pricing

Wholesale price overrides for contacts enrolled in a named promotion. Both
overrides are evaluated before the catalog price.
"""

import logging
from typing import Optional

from reseller.src.billing.domain import (
    ProductLine,
    Subscription,
    SubscriberKind,
)
from reseller.src.billing.shared.config import (
    MONTHLY_CYCLE_INDEX,
    YEARLY_CYCLE_INDEX,
    PromotionKind,
    get_promotional_price,
)

logger = logging.getLogger(__name__)


def _contact_in_promotion(subscription: Subscription, promotion: str) -> bool:
    subscriber = subscription.subscriber
    return (
        subscriber is not None
        and subscriber.kind is SubscriberKind.CONTACT
        and subscriber.eligible_for_promotion(promotion)
    )


def cycle_index(subscription: Subscription) -> int:
    """Column in a promotional pricing row; commitment plans bill monthly."""
    return YEARLY_CYCLE_INDEX if subscription.yearly else MONTHLY_CYCLE_INDEX


def yext_promotional_price(subscription: Subscription) -> Optional[int]:
    """
    Yext holiday pricing for eligible contacts.

    The cheapest wholesale tier is free while the reseller has free Yext
    subscriptions left; every other rank reads the promotional table.

    Returns:
        Price in dollars, or None when the promotion does not apply
    """
    if subscription.product_line != ProductLine.YEXT:
        return None
    if not _contact_in_promotion(subscription, PromotionKind.YEXT_XMAS_2019):
        return None

    rank = subscription.product.wholesale_rank(subscription.product_tier)
    if rank is None:
        return None

    if rank == 0 and subscription.subscriber.user.remaining_free_yext_subscriptions > 0:
        return 0

    price = get_promotional_price(rank, cycle_index(subscription))
    if price is None:
        logger.warning(f"[PRICING] No Yext promotional price for rank {rank} on {subscription.id}")
    return price


def advice_local_promotional_price(subscription: Subscription) -> Optional[int]:
    """Bundled Advice Local subscriptions are free while allotments remain."""
    if subscription.product_line != ProductLine.ADVICE_LOCAL:
        return None
    if not _contact_in_promotion(subscription, PromotionKind.ADVICE_LOCAL_BUNDLE):
        return None
    if subscription.subscriber.user.remaining_free_advice_local_subscriptions <= 0:
        return None
    return 0
