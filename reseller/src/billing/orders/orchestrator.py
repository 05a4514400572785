"""
Order Orchestrator

Creates and cancels the product-line specific orders behind a subscription.
Order creation is not idempotent downstream, so every create first checks for
an open order of the same kind and reuses it.
"""

import logging
from typing import List, Optional

from reseller.src.billing.domain import Order, OrderKind, Subscription
from reseller.src.billing.shared.config import BRAND_FULL_OPTIMIZATION_TIER_TITLE
from reseller.src.billing.shared.exceptions import SubscriptionError
from .interfaces import OrderServiceInterface

logger = logging.getLogger(__name__)


class OrderOrchestrator:
    """
    Generic orchestrator: one vendor order per subscription, no bundles.

    Product lines subclass this to change the primary order kind and the
    bundled orders created after payment.
    """

    primary_kind: OrderKind = OrderKind.VENDOR

    def __init__(self, order_service: OrderServiceInterface):
        self.order_service = order_service

    async def _create_once(self, subscription: Subscription, kind: OrderKind) -> Order:
        existing = await self.order_service.find_open_order(subscription.id, kind)
        if existing is not None:
            logger.info(f"[ORDERS] {kind.value} order {existing.id} already open for {subscription.id}, reusing")
            return existing

        order = await self.order_service.create_order(subscription, kind)
        logger.info(f"[ORDERS] Created {kind.value} order {order.id} for {subscription.id}")
        return order

    async def create_order(self, subscription: Subscription) -> Order:
        """Create the primary order."""
        return await self._create_once(subscription, self.primary_kind)

    async def create_bundled_orders(self, subscription: Subscription) -> List[Order]:
        return []

    async def primary_order(self, subscription: Subscription) -> Optional[Order]:
        return await self.order_service.latest_order(subscription.id, self.primary_kind)

    async def cancel_order(self, subscription: Subscription) -> Optional[Order]:
        """Cancel the primary order if it is active; otherwise leave it alone."""
        order = await self.primary_order(subscription)
        if order is None or not order.is_active():
            return None

        cancelled = await self.order_service.cancel_order(order)
        logger.info(f"[ORDERS] Cancelled {self.primary_kind.value} order {order.id} for {subscription.id}")
        return cancelled


class BrandOrderOrchestrator(OrderOrchestrator):
    """
    Brand subscriptions order a campaign, then optimization add-ons.

    The Google business profile optimization is always bundled; website
    optimization only for the tier that advertises both.
    """

    primary_kind = OrderKind.CAMPAIGN

    @staticmethod
    def includes_gbp_and_website_optimization(subscription: Subscription) -> bool:
        tier = subscription.product_tier
        return tier is not None and tier.title == BRAND_FULL_OPTIMIZATION_TIER_TITLE

    async def create_order(self, subscription: Subscription) -> Order:
        if subscription.campaign is None:
            raise SubscriptionError(
                message="Brand subscription has no campaign to order",
                code="MISSING_CAMPAIGN",
                subscription_id=subscription.id
            )
        return await super().create_order(subscription)

    async def create_bundled_orders(self, subscription: Subscription) -> List[Order]:
        orders = [await self._create_once(subscription, OrderKind.GBP_OPTIMIZATION)]
        if not self.includes_gbp_and_website_optimization(subscription):
            return orders

        orders.append(await self._create_once(subscription, OrderKind.WEBSITE_OPTIMIZATION))
        return orders
