"""
Pricing Engine

Pure price computations for a subscription:
- Wholesale price (with promotional overrides)
- Markup total and display price
- Member payouts for the recurring price and the setup fee
- One-time fee amount charged through the provider

Catalog costs are stored in cents and divided (truncating) to dollars here.
Markup amounts are already in dollars and are never divided.
"""

import logging
from typing import Optional

from reseller.src.billing.domain import Subscription, get_traits
from reseller.src.billing.shared.config import MINOR_UNITS_PER_MAJOR
from .promotions import advice_local_promotional_price, yext_promotional_price

logger = logging.getLogger(__name__)


def _to_major(amount_minor: Optional[int]) -> int:
    return int(amount_minor or 0) // MINOR_UNITS_PER_MAJOR


class PricingEngine:
    """
    Compute what a subscriber is charged and what the reseller earns.

    None of these methods raise for missing tiers or markups; absent data
    prices at 0.

    Usage:
        engine = PricingEngine()
        engine.set_markup_total(subscription)
        engine.display_price(subscription)
    """

    def catalog_cost(self, subscription: Subscription) -> int:
        """Tier cost in cents for the subscription's cycle."""
        tier = subscription.product_tier
        if tier is None:
            return 0
        if subscription.yearly:
            return int(tier.yearly_cost or 0)
        return int(tier.cost or 0)

    def wholesale_price(self, subscription: Subscription) -> int:
        """
        Price the reseller pays upstream, in dollars.

        Promotions are checked first, then the catalog cost for the cycle.
        """
        if subscription.product_tier is None:
            return 0

        for promotion in (yext_promotional_price, advice_local_promotional_price):
            price = promotion(subscription)
            if price is not None:
                return price

        return _to_major(self.catalog_cost(subscription))

    def markup_total(self, subscription: Subscription) -> int:
        """Wholesale price grossed up by the markup percentage."""
        if subscription.markup is None:
            return 0
        return self.wholesale_price(subscription) * (100 + subscription.markup.percentage) // 100

    def set_markup_total(self, subscription: Subscription) -> int:
        """Recompute and store ``markup.total``; returns the new total."""
        if subscription.markup is None:
            return 0
        subscription.markup.total = self.markup_total(subscription)
        logger.debug(f"[PRICING] Markup total for {subscription.id} set to {subscription.markup.total}")
        return subscription.markup.total

    def display_price(self, subscription: Subscription) -> int:
        """Price shown to the subscriber, in dollars."""
        markup = subscription.markup
        traits = get_traits(subscription.product_line)

        if markup is not None and (markup.total > 0 or traits.always_applies_markup):
            return markup.total * traits.markup_multiplier

        if subscription.price is None:
            return _to_major(self.catalog_cost(subscription))
        return subscription.price // MINOR_UNITS_PER_MAJOR

    def markup_success_fee(self, subscription: Subscription) -> Optional[int]:
        markup = subscription.markup
        if markup is not None and markup.success_fee > 0:
            return markup.success_fee
        return None

    def member_payout(self, subscription: Subscription) -> int:
        """Reseller's share of the recurring price."""
        markup = subscription.markup
        if markup is not None and markup.total > 0:
            return markup.total - self.wholesale_price(subscription)
        return 0

    def setup_fee_wholesale_price(self, subscription: Subscription) -> int:
        """Upstream setup fee in dollars: tier fee first, then the product fee."""
        tier = subscription.product_tier
        product = subscription.product
        if tier is not None and tier.setup_fee > 0:
            return _to_major(tier.setup_fee)
        if product is not None and product.one_time_fee > 0:
            return _to_major(product.one_time_fee)
        return 0

    def setup_fee_member_payout(self, subscription: Subscription) -> int:
        markup = subscription.markup
        if markup is not None and markup.setup_fee > 0:
            return markup.setup_fee - self.setup_fee_wholesale_price(subscription)
        return 0

    def one_time_fee_amount(self, subscription: Subscription) -> int:
        """
        One-time fee to invoice, in cents.

        The markup setup fee (dollars) wins over the product's flat fee (cents).
        """
        if subscription.markup is not None:
            return int(subscription.markup.setup_fee or 0) * MINOR_UNITS_PER_MAJOR
        return int(subscription.product.one_time_fee or 0)


# Global instance
pricing_engine = PricingEngine()


# Convenience functions
def wholesale_price(subscription: Subscription) -> int:
    return pricing_engine.wholesale_price(subscription)


def display_price(subscription: Subscription) -> int:
    return pricing_engine.display_price(subscription)


def member_payout(subscription: Subscription) -> int:
    return pricing_engine.member_payout(subscription)


def setup_fee_member_payout(subscription: Subscription) -> int:
    return pricing_engine.setup_fee_member_payout(subscription)


def setup_fee_wholesale_price(subscription: Subscription) -> int:
    return pricing_engine.setup_fee_wholesale_price(subscription)


def set_markup_total(subscription: Subscription) -> int:
    return pricing_engine.set_markup_total(subscription)
