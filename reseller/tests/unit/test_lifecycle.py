"""Tests for destroy, tier change and lifecycle queries."""

from datetime import datetime, timedelta, timezone

import pytest

from reseller.src.billing.domain import (
    Markup,
    PaymentSource,
    ProductLine,
    ProductTier,
    SubscriptionState,
    SubscriptionSubscriber,
    User,
)
from reseller.src.billing.shared.exceptions import (
    ActiveSubscriptionDeletionError,
    OutstandingInvoiceDeletionError,
)
from reseller.src.billing.subscriptions import LifecycleHandler
from reseller.src.billing.subscriptions.lifecycle import (
    about_to_expire,
    comped,
    needs_order,
    notification_email,
    user,
)

from conftest import FIXED_NOW


@pytest.fixture
def lifecycle(repository, adapter):
    return LifecycleHandler(repository, adapter)


class TestDestroy:

    @pytest.mark.asyncio
    async def test_active_subscription_cannot_be_destroyed(self, lifecycle, repository, make_subscription):
        subscription = make_subscription(state=SubscriptionState.ACTIVE)

        with pytest.raises(ActiveSubscriptionDeletionError):
            await lifecycle.destroy(subscription, now=FIXED_NOW)

        assert repository.stored(subscription.id).deleted_at is None

    @pytest.mark.asyncio
    async def test_invoiced_subscription_cannot_be_destroyed(self, lifecycle, repository, make_subscription):
        subscription = make_subscription(state=SubscriptionState.CANCELLED)
        repository.add_invoice(subscription.id)

        with pytest.raises(OutstandingInvoiceDeletionError):
            await lifecycle.destroy(subscription, now=FIXED_NOW)

        assert repository.stored(subscription.id).deleted_at is None

    @pytest.mark.asyncio
    async def test_destroy_tombstones(self, lifecycle, repository, make_subscription):
        subscription = make_subscription(state=SubscriptionState.NEEDS_MARKUP)

        await lifecycle.destroy(subscription, now=FIXED_NOW)

        assert subscription.deleted_at == FIXED_NOW
        assert repository.stored(subscription.id).deleted_at == FIXED_NOW
        assert await repository.list_inactive() == []


class TestChangeTier:

    @pytest.mark.asyncio
    async def test_brand_tier_change_is_a_noop(self, lifecycle, repository, gateway, make_subscription, tier):
        subscription = make_subscription(product_line=ProductLine.BRAND, provider_subscription_id='sub_9')
        new_tier = ProductTier(id='tier-pro', cost=5000, stripe_monthly_plan_id='plan_pro')

        result = await lifecycle.change_tier(subscription, new_tier)

        assert result == {'success': True, 'changed': False}
        assert subscription.product_tier is tier
        assert gateway.plan_changes == []
        assert repository.save_count == 0

    @pytest.mark.asyncio
    async def test_generic_tier_change_recomputes_markup(self, lifecycle, repository, gateway, make_subscription):
        subscription = make_subscription(
            provider_subscription_id='sub_9',
            markup=Markup(percentage=20, total=12),
        )
        new_tier = ProductTier(id='tier-pro', cost=10000, stripe_monthly_plan_id='plan_pro')

        result = await lifecycle.change_tier(subscription, new_tier)

        assert result['changed'] is True
        assert result['markup_total'] == 120
        assert gateway.plan_changes == [('sub_9', 'plan_pro')]
        assert subscription.product_tier.id == 'tier-pro'
        assert subscription.price == 10000
        assert repository.stored(subscription.id).markup.total == 120
        assert subscription.lock_version == 1

    @pytest.mark.asyncio
    async def test_update_payment_source_persists(self, lifecycle, repository, gateway, make_subscription):
        subscription = make_subscription(provider_subscription_id='sub_4')
        new_source = PaymentSource(id='ps-2', stripe_id='cus_123', stripe_source_id='src_9')

        await lifecycle.update_payment_source(subscription, new_source)

        assert gateway.source_updates == [('sub_4', 'src_9')]
        assert repository.stored(subscription.id).payment_source.id == 'ps-2'


class TestQueries:

    @pytest.mark.parametrize("days_ahead,expected", [
        (5, True),
        (13, True),
        (14, False),
        (30, False),
        (-1, False),
    ])
    def test_about_to_expire(self, days_ahead, expected, make_subscription):
        subscription = make_subscription(store=False, renewal_date=FIXED_NOW + timedelta(days=days_ahead))

        assert about_to_expire(subscription, now=FIXED_NOW) is expected

    def test_about_to_expire_without_renewal(self, make_subscription):
        assert about_to_expire(make_subscription(store=False), now=FIXED_NOW) is False

    def test_comped_mono_add_on(self, make_subscription, reseller_user):
        parent = SubscriptionSubscriber(
            id='parent-1',
            user=reseller_user,
            created_at=datetime(2023, 3, 15, 9, 30, tzinfo=timezone.utc),
        )
        bundled = make_subscription(
            store=False,
            product_line=ProductLine.MONO,
            subscriber=parent,
            renewal_date=datetime(2024, 3, 15, 0, 0, tzinfo=timezone.utc),
        )
        renewed = make_subscription(
            store=False,
            product_line=ProductLine.MONO,
            subscriber=parent,
            renewal_date=datetime(2025, 3, 15, tzinfo=timezone.utc),
        )

        assert comped(bundled) is True
        assert comped(renewed) is False

    def test_comped_requires_mono_and_parent_subscription(self, make_subscription):
        subscription = make_subscription(
            store=False,
            product_line=ProductLine.MONO,
            renewal_date=datetime(2024, 3, 15, tzinfo=timezone.utc),
        )

        assert comped(subscription) is False

    def test_needs_order_only_for_brand(self, make_subscription):
        brand = make_subscription(store=False, product_line=ProductLine.BRAND,
                                  state=SubscriptionState.NEEDS_ORDER)
        generic = make_subscription(store=False, state=SubscriptionState.NEEDS_ORDER)
        brand_paid = make_subscription(store=False, product_line=ProductLine.BRAND,
                                       state=SubscriptionState.PAYMENT_NEEDED)

        assert needs_order(brand) is True
        assert needs_order(generic) is False
        assert needs_order(brand_paid) is False

    def test_user_and_notification_email(self, make_subscription, reseller_user):
        subscription = make_subscription(store=False)

        assert user(subscription) is reseller_user
        assert notification_email(subscription) == 'billing@example.com'

    def test_notification_email_without_source(self, make_subscription):
        owner = User(id='user-2', email='x@example.com')
        subscription = make_subscription(store=False, subscriber=owner, payment_source=None)

        assert user(subscription) is owner
        assert notification_email(subscription) is None
