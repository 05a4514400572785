"""Tests for generic and Brand order orchestration."""

import pytest

from reseller.src.billing.domain import Campaign, OrderKind, OrderStatus, ProductLine, ProductTier
from reseller.src.billing.orders import BrandOrderOrchestrator, OrderOrchestrator
from reseller.src.billing.shared.config import BRAND_FULL_OPTIMIZATION_TIER_TITLE
from reseller.src.billing.shared.exceptions import SubscriptionError


def _brand_subscription(make_subscription, tier_title='Starter'):
    return make_subscription(
        store=False,
        product_line=ProductLine.BRAND,
        product_tier=ProductTier(id='brand-tier', title=tier_title, cost=5000),
        campaign=Campaign(id='camp-1', subscription_id='sub-x', campaign_code='C-1', customer_id='cust-1'),
    )


class TestOrderOrchestrator:

    @pytest.mark.asyncio
    async def test_creates_vendor_order(self, order_service, make_subscription):
        subscription = make_subscription(store=False)

        order = await OrderOrchestrator(order_service).create_order(subscription)

        assert order.kind == OrderKind.VENDOR
        assert order_service.created == [order]

    @pytest.mark.asyncio
    async def test_reuses_open_order(self, order_service, make_subscription):
        subscription = make_subscription(store=False)
        existing = order_service.add(subscription.id, OrderKind.VENDOR, OrderStatus.ACTIVE)

        order = await OrderOrchestrator(order_service).create_order(subscription)

        assert order is existing
        assert order_service.created == []

    @pytest.mark.asyncio
    async def test_failed_order_does_not_block_new_one(self, order_service, make_subscription):
        subscription = make_subscription(store=False)
        order_service.add(subscription.id, OrderKind.VENDOR, OrderStatus.FAILED)

        order = await OrderOrchestrator(order_service).create_order(subscription)

        assert order_service.created == [order]

    @pytest.mark.asyncio
    async def test_no_bundled_orders(self, order_service, make_subscription):
        subscription = make_subscription(store=False)

        assert await OrderOrchestrator(order_service).create_bundled_orders(subscription) == []

    @pytest.mark.asyncio
    async def test_cancel_only_active_order(self, order_service, make_subscription):
        subscription = make_subscription(store=False)
        order_service.add(subscription.id, OrderKind.VENDOR, OrderStatus.PENDING)
        orchestrator = OrderOrchestrator(order_service)

        assert await orchestrator.cancel_order(subscription) is None
        assert order_service.cancelled == []

        active = order_service.add(subscription.id, OrderKind.VENDOR, OrderStatus.ACTIVE)
        cancelled = await orchestrator.cancel_order(subscription)

        assert cancelled is active
        assert active.status == OrderStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_without_order(self, order_service, make_subscription):
        subscription = make_subscription(store=False)

        assert await OrderOrchestrator(order_service).cancel_order(subscription) is None


class TestBrandOrderOrchestrator:

    @pytest.mark.asyncio
    async def test_primary_order_is_campaign(self, order_service, make_subscription):
        subscription = _brand_subscription(make_subscription)

        order = await BrandOrderOrchestrator(order_service).create_order(subscription)

        assert order.kind == OrderKind.CAMPAIGN

    @pytest.mark.asyncio
    async def test_missing_campaign_raises(self, order_service, make_subscription):
        subscription = make_subscription(store=False, product_line=ProductLine.BRAND)

        with pytest.raises(SubscriptionError) as exc_info:
            await BrandOrderOrchestrator(order_service).create_order(subscription)

        assert exc_info.value.code == "MISSING_CAMPAIGN"
        assert order_service.created == []

    @pytest.mark.asyncio
    async def test_standard_tier_bundles_gbp_only(self, order_service, make_subscription):
        subscription = _brand_subscription(make_subscription)

        orders = await BrandOrderOrchestrator(order_service).create_bundled_orders(subscription)

        assert [o.kind for o in orders] == [OrderKind.GBP_OPTIMIZATION]

    @pytest.mark.asyncio
    async def test_full_optimization_tier_bundles_both(self, order_service, make_subscription):
        subscription = _brand_subscription(make_subscription, tier_title=BRAND_FULL_OPTIMIZATION_TIER_TITLE)

        orders = await BrandOrderOrchestrator(order_service).create_bundled_orders(subscription)

        assert [o.kind for o in orders] == [OrderKind.GBP_OPTIMIZATION, OrderKind.WEBSITE_OPTIMIZATION]

    @pytest.mark.asyncio
    async def test_bundled_orders_not_duplicated(self, order_service, make_subscription):
        subscription = _brand_subscription(make_subscription, tier_title=BRAND_FULL_OPTIMIZATION_TIER_TITLE)
        orchestrator = BrandOrderOrchestrator(order_service)

        await orchestrator.create_bundled_orders(subscription)
        await orchestrator.create_bundled_orders(subscription)

        assert len(order_service.created) == 2
