"""Tests for the pricing engine.

Tests cover:
- Wholesale price per cycle and promotional overrides
- Markup total and display price (including the undivided markup path)
- Member payouts and setup fees
"""

import pytest

from reseller.src.billing.domain import (
    Contact,
    CycleType,
    Markup,
    Product,
    ProductLine,
    ProductTier,
    User,
)
from reseller.src.billing.pricing import pricing_engine
from reseller.src.billing.shared.config import PromotionKind


def _ladder():
    return [
        ProductTier(id='t0', cost=1000, yearly_cost=10000),
        ProductTier(id='t1', cost=2000, yearly_cost=20000),
        ProductTier(id='t2', cost=4000, yearly_cost=40000),
    ]


def _contact(promotions, free_yext=0, free_advice_local=0):
    user = User(
        id='user-9',
        email='owner@example.com',
        remaining_free_yext_subscriptions=free_yext,
        remaining_free_advice_local_subscriptions=free_advice_local,
    )
    return Contact(id='contact-1', user=user, eligible_promotions=frozenset(promotions))


class TestWholesalePrice:
    """Tests for wholesale price without promotions."""

    def test_yearly_cost_in_major_units(self, make_subscription):
        tier = ProductTier(id='t', cost=1000, yearly_cost=12000)
        subscription = make_subscription(store=False, product_tier=tier, cycle_type=CycleType.YEARLY)

        assert pricing_engine.wholesale_price(subscription) == 120

    def test_monthly_cost_truncates(self, make_subscription):
        tier = ProductTier(id='t', cost=1999, yearly_cost=12000)
        subscription = make_subscription(store=False, product_tier=tier, cycle_type=CycleType.MONTHLY)

        assert pricing_engine.wholesale_price(subscription) == 19

    def test_commitment_uses_monthly_cost(self, make_subscription):
        tier = ProductTier(id='t', cost=1000, yearly_cost=12000)
        subscription = make_subscription(store=False, product_tier=tier,
                                         cycle_type=CycleType.MONTHLY_COMMITMENT)

        assert pricing_engine.wholesale_price(subscription) == 10

    def test_no_tier_prices_at_zero(self, make_subscription):
        subscription = make_subscription(store=False, product_tier=None)

        assert pricing_engine.wholesale_price(subscription) == 0
        assert pricing_engine.display_price(subscription) == 0


class TestPromotions:
    """Tests for Yext and Advice Local promotional overrides."""

    def test_yext_first_rank_free_while_allotment_remains(self, make_subscription):
        tiers = _ladder()
        subscription = make_subscription(
            store=False,
            product_line=ProductLine.YEXT,
            product=Product(id='yext', product_tiers=tiers),
            product_tier=tiers[0],
            subscriber=_contact({PromotionKind.YEXT_XMAS_2019}, free_yext=1),
        )

        assert pricing_engine.wholesale_price(subscription) == 0

    @pytest.mark.parametrize("cycle,rank,expected", [
        (CycleType.MONTHLY, 1, 25),
        (CycleType.YEARLY, 1, 250),
        (CycleType.YEARLY, 2, 450),
    ])
    def test_yext_reads_promotional_table(self, cycle, rank, expected, make_subscription):
        tiers = _ladder()
        subscription = make_subscription(
            store=False,
            product_line=ProductLine.YEXT,
            product=Product(id='yext', product_tiers=tiers),
            product_tier=tiers[rank],
            cycle_type=cycle,
            subscriber=_contact({PromotionKind.YEXT_XMAS_2019}),
        )

        assert pricing_engine.wholesale_price(subscription) == expected

    def test_yext_ineligible_contact_pays_catalog(self, make_subscription):
        tiers = _ladder()
        subscription = make_subscription(
            store=False,
            product_line=ProductLine.YEXT,
            product=Product(id='yext', product_tiers=tiers),
            product_tier=tiers[1],
            subscriber=_contact(set(), free_yext=3),
        )

        assert pricing_engine.wholesale_price(subscription) == 20

    def test_yext_user_subscriber_pays_catalog(self, make_subscription):
        tiers = _ladder()
        subscription = make_subscription(
            store=False,
            product_line=ProductLine.YEXT,
            product=Product(id='yext', product_tiers=tiers),
            product_tier=tiers[0],
        )

        assert pricing_engine.wholesale_price(subscription) == 10

    def test_advice_local_bundle_free_with_allotment(self, make_subscription):
        subscription = make_subscription(
            store=False,
            product_line=ProductLine.ADVICE_LOCAL,
            subscriber=_contact({PromotionKind.ADVICE_LOCAL_BUNDLE}, free_advice_local=2),
        )

        assert pricing_engine.wholesale_price(subscription) == 0

    def test_advice_local_bundle_without_allotment_pays_catalog(self, make_subscription):
        subscription = make_subscription(
            store=False,
            product_line=ProductLine.ADVICE_LOCAL,
            subscriber=_contact({PromotionKind.ADVICE_LOCAL_BUNDLE}, free_advice_local=0),
        )

        assert pricing_engine.wholesale_price(subscription) == 10


class TestMarkup:
    """Tests for markup total and display price."""

    def test_set_markup_total(self, make_subscription):
        tier = ProductTier(id='t', cost=10000)
        subscription = make_subscription(store=False, product_tier=tier, markup=Markup(percentage=20))

        total = pricing_engine.set_markup_total(subscription)

        assert total == 120
        assert subscription.markup.total == 120

    def test_display_price_uses_markup_total_undivided(self, make_subscription):
        subscription = make_subscription(store=False, markup=Markup(percentage=20, total=120), price=99900)

        assert pricing_engine.display_price(subscription) == 120

    def test_display_price_falls_back_to_stored_price(self, make_subscription):
        subscription = make_subscription(store=False, markup=Markup(total=0), price=1999)

        assert pricing_engine.display_price(subscription) == 19

    def test_display_price_from_tier_when_unpriced(self, make_subscription):
        subscription = make_subscription(store=False, cycle_type=CycleType.YEARLY)

        assert pricing_engine.display_price(subscription) == 120

    def test_yext_always_shows_markup(self, make_subscription):
        subscription = make_subscription(
            store=False,
            product_line=ProductLine.YEXT,
            markup=Markup(total=0),
            price=5000,
        )

        assert pricing_engine.display_price(subscription) == 0

    def test_markup_success_fee(self, make_subscription):
        with_fee = make_subscription(store=False, markup=Markup(success_fee=15))
        without_fee = make_subscription(store=False, markup=Markup(success_fee=0))

        assert pricing_engine.markup_success_fee(with_fee) == 15
        assert pricing_engine.markup_success_fee(without_fee) is None


class TestPayouts:
    """Tests for member payouts and setup fees."""

    def test_member_payout(self, make_subscription):
        tier = ProductTier(id='t', cost=10000)
        subscription = make_subscription(store=False, product_tier=tier, markup=Markup(percentage=20, total=120))

        assert pricing_engine.member_payout(subscription) == 20

    def test_member_payout_without_markup(self, make_subscription):
        subscription = make_subscription(store=False)

        assert pricing_engine.member_payout(subscription) == 0

    def test_setup_fee_wholesale_prefers_tier_fee(self, make_subscription):
        tier = ProductTier(id='t', setup_fee=2599)
        product = Product(id='p', product_tiers=[tier], one_time_fee=9900)
        subscription = make_subscription(store=False, product=product, product_tier=tier)

        assert pricing_engine.setup_fee_wholesale_price(subscription) == 25

    def test_setup_fee_wholesale_falls_back_to_product_fee(self, make_subscription):
        tier = ProductTier(id='t', setup_fee=0)
        product = Product(id='p', product_tiers=[tier], one_time_fee=5000)
        subscription = make_subscription(store=False, product=product, product_tier=tier)

        assert pricing_engine.setup_fee_wholesale_price(subscription) == 50

    def test_setup_fee_member_payout(self, make_subscription):
        tier = ProductTier(id='t', setup_fee=5000)
        product = Product(id='p', product_tiers=[tier])
        subscription = make_subscription(
            store=False,
            product=product,
            product_tier=tier,
            markup=Markup(setup_fee=80),
        )

        assert pricing_engine.setup_fee_member_payout(subscription) == 30

    def test_one_time_fee_prefers_markup_setup_fee(self, make_subscription):
        product = Product(id='p', one_time_fee=9900)
        marked_up = make_subscription(store=False, product=product, markup=Markup(setup_fee=50))
        flat = make_subscription(store=False, product=product)

        assert pricing_engine.one_time_fee_amount(marked_up) == 5000
        assert pricing_engine.one_time_fee_amount(flat) == 9900
