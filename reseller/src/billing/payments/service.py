"""
Billing Gateway Adapter

Subscription-level billing operations built on a ``BillingGatewayInterface``:
- Create the provider subscription (at most once per subscription)
- Cancel it (idempotent)
- Charge the one-time setup fee
- Switch payment source / plan

Mutations are applied to the subscription object passed in; persisting them
is the caller's job (the state machine commits them with the transition).
"""

import logging
from typing import Optional

from reseller.src.billing.domain import PaymentSource, Subscription
from reseller.src.billing.external.stripe import (
    MetadataBuilder,
    generate_one_time_fee_idempotency_key,
    generate_subscription_create_idempotency_key,
)
from reseller.src.billing.pricing import pricing_engine
from reseller.src.billing.shared.config import (
    DEFAULT_CURRENCY,
    PROVIDER_STATUS_INCOMPLETE,
)
from reseller.src.billing.shared.exceptions import IncompleteSubscriptionError, PaymentError
from .interfaces import BillingGatewayInterface

logger = logging.getLogger(__name__)


class BillingGatewayAdapter:
    """
    Wraps the payment provider for a single subscription at a time.

    Usage:
        adapter = BillingGatewayAdapter(StripeBillingGateway())
        await adapter.create_subscription(subscription)
    """

    def __init__(self, gateway: BillingGatewayInterface, currency: str = DEFAULT_CURRENCY):
        self.gateway = gateway
        self.currency = currency

    @staticmethod
    def plan_for(subscription: Subscription) -> Optional[str]:
        """Provider plan for the cycle; commitment plans bill on the monthly plan."""
        tier = subscription.product_tier
        if tier is None:
            return None
        if subscription.yearly:
            return tier.stripe_yearly_plan_id
        return tier.stripe_monthly_plan_id

    @staticmethod
    def _customer_ref(subscription: Subscription) -> Optional[str]:
        source = subscription.payment_source
        return source.stripe_id if source else None

    async def create_subscription(self, subscription: Subscription) -> bool:
        """
        Create the provider subscription and record its id and price.

        Skipped when a provider subscription already exists or the tier is free.

        Returns:
            True when a provider subscription was created

        Raises:
            IncompleteSubscriptionError: provider could not charge; nothing is recorded
        """
        if subscription.provider_subscription_id:
            logger.info(
                f"[STRIPE] {subscription.id} already linked to {subscription.provider_subscription_id}, skipping create"
            )
            return False

        cost = pricing_engine.catalog_cost(subscription)
        if cost <= 0:
            logger.info(f"[STRIPE] {subscription.id} has a free tier, no provider subscription needed")
            return False

        plan_id = self.plan_for(subscription)
        customer = self._customer_ref(subscription)
        if not plan_id or not customer:
            raise PaymentError(
                message="Missing provider plan or customer for subscription",
                code="PROVIDER_SETUP_INCOMPLETE",
                subscription_id=subscription.id
            )

        provider_sub = await self.gateway.create_subscription(
            customer_ref=customer,
            plan_id=plan_id,
            metadata=MetadataBuilder.process(subscription),
            idempotency_key=generate_subscription_create_idempotency_key(subscription.id, plan_id),
        )

        if provider_sub.status == PROVIDER_STATUS_INCOMPLETE:
            logger.warning(f"[STRIPE] Provider subscription {provider_sub.id} incomplete for {subscription.id}")
            raise IncompleteSubscriptionError(
                subscription_id=subscription.id,
                provider_subscription_id=provider_sub.id
            )

        subscription.provider_subscription_id = provider_sub.id
        subscription.price = cost
        logger.info(f"[STRIPE] Created {provider_sub.id} for {subscription.id} at {cost} cents")
        return True

    async def cancel_subscription(self, subscription: Subscription) -> bool:
        """
        Cancel the provider subscription unless there is none or it is already canceled.

        Returns:
            True when a cancel call was made
        """
        provider_id = subscription.provider_subscription_id
        if not provider_id:
            return False

        canceled = await self.gateway.cancel_subscription(provider_id)
        if canceled:
            logger.info(f"[STRIPE] Canceled {provider_id} for {subscription.id}")
        else:
            logger.info(f"[STRIPE] {provider_id} already canceled")
        return canceled

    async def charge_one_time_fee(self, subscription: Subscription) -> Optional[str]:
        """
        Invoice the setup fee once, if the product charges one.

        Returns:
            Provider invoice item id, or None when nothing was charged
        """
        if not subscription.product.charge_one_time_fee:
            return None

        fee = pricing_engine.one_time_fee_amount(subscription)
        if fee == 0:
            return None

        item_id = await self.gateway.create_one_time_charge(
            customer_ref=self._customer_ref(subscription),
            amount_minor_units=fee,
            currency=self.currency,
            description=subscription.product.one_time_fee_description,
            idempotency_key=generate_one_time_fee_idempotency_key(subscription.id, fee),
        )
        logger.info(f"[STRIPE] Charged one-time fee of {fee} cents for {subscription.id}")
        return item_id

    async def update_payment_source(self, subscription: Subscription, new_source: PaymentSource) -> None:
        """Point the subscription, and its provider subscription if any, at a new source."""
        if subscription.provider_subscription_id and new_source.stripe_source_id:
            await self.gateway.update_default_source(
                subscription.provider_subscription_id,
                new_source.stripe_source_id
            )
        subscription.payment_source = new_source

    async def change_plan(self, subscription: Subscription) -> bool:
        """Move the provider subscription onto the plan of the current tier."""
        plan_id = self.plan_for(subscription)
        if not subscription.provider_subscription_id or not plan_id:
            return False
        await self.gateway.change_plan(subscription.provider_subscription_id, plan_id)
        subscription.price = pricing_engine.catalog_cost(subscription)
        return True
