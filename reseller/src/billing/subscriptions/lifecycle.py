"""
Lifecycle Handler

Subscription operations that are not state transitions:
- Destroy (tombstone) guarded against active or invoiced subscriptions
- Tier change
- Payment source change
- Renewal window, comped and ownership queries
"""

import copy
import logging
from datetime import datetime
from typing import Dict, Optional

from reseller.src.billing.domain import (
    PaymentSource,
    ProductLine,
    ProductTier,
    SubscriberKind,
    Subscription,
    SubscriptionState,
    User,
    get_traits,
    owning_user,
)
from reseller.src.billing.payments import BillingGatewayAdapter
from reseller.src.billing.pricing import pricing_engine
from reseller.src.billing.shared.config import RENEWAL_THRESHOLD_DAYS
from reseller.utils.timezone import timezone
from .locks import SubscriptionLockRegistry
from .repository import SubscriptionRepository
from .state_machine import commit

logger = logging.getLogger(__name__)


class LifecycleHandler:
    """
    Handles subscription changes outside the state machine.

    Writes go through the same per-subscription lock and version check as
    transitions, so they never interleave with one.
    """

    def __init__(
        self,
        repository: SubscriptionRepository,
        gateway: BillingGatewayAdapter,
        locks: Optional[SubscriptionLockRegistry] = None
    ):
        self.repository = repository
        self.gateway = gateway
        self.locks = locks or SubscriptionLockRegistry()

    async def destroy(self, subscription: Subscription, now: Optional[datetime] = None) -> Subscription:
        """
        Tombstone a subscription.

        Raises:
            OutstandingInvoiceDeletionError: the subscription has an invoice
            ActiveSubscriptionDeletionError: the subscription is active
        """
        now = now or timezone.now()
        async with self.locks.hold(subscription.id):
            await self.repository.soft_delete_if_allowed(subscription, deleted_at=now)
        logger.info(f"[LIFECYCLE] Soft-deleted subscription {subscription.id}")
        return subscription

    async def change_tier(self, subscription: Subscription, new_tier: ProductTier) -> Dict:
        """
        Move a subscription to another tier.

        Lines without tier change support accept the call and change nothing.

        Returns:
            Dict with success and whether anything changed
        """
        if not get_traits(subscription.product_line).supports_tier_change:
            logger.info(
                f"[LIFECYCLE] {subscription.product_line.value} does not change tiers, "
                f"ignoring change for {subscription.id}"
            )
            return {'success': True, 'changed': False}

        async with self.locks.hold(subscription.id):
            working = copy.deepcopy(subscription)
            working.product_tier = new_tier
            if working.markup is not None:
                pricing_engine.set_markup_total(working)
            await self.gateway.change_plan(working)
            await commit(self.repository, working, subscription)

        logger.info(f"[LIFECYCLE] {subscription.id} moved to tier {new_tier.id}")
        return {
            'success': True,
            'changed': True,
            'product_tier_id': new_tier.id,
            'markup_total': subscription.markup.total if subscription.markup else None,
        }

    async def update_payment_source(self, subscription: Subscription, new_source: PaymentSource) -> Subscription:
        async with self.locks.hold(subscription.id):
            working = copy.deepcopy(subscription)
            await self.gateway.update_payment_source(working, new_source)
            await commit(self.repository, working, subscription)

        logger.info(f"[LIFECYCLE] {subscription.id} now billed to payment source {new_source.id}")
        return subscription


def about_to_expire(subscription: Subscription, now: Optional[datetime] = None) -> bool:
    """Renewal is still ahead but closer than the renewal threshold."""
    if subscription.renewal_date is None:
        return False

    now = now or timezone.now()
    renewal = timezone.to_utc(subscription.renewal_date)
    return renewal > now and renewal - now < timezone.days(RENEWAL_THRESHOLD_DAYS)


def comped(subscription: Subscription) -> bool:
    """
    Mono add-ons bundled into a parent subscription renew for free for one
    year from the parent's creation date.
    """
    subscriber = subscription.subscriber
    if subscription.product_line != ProductLine.MONO:
        return False
    if subscriber is None or subscriber.kind is not SubscriberKind.SUBSCRIPTION:
        return False
    if subscription.renewal_date is None:
        return False

    expected = timezone.add_years(subscriber.created_at, 1).date()
    return subscription.renewal_date.date() == expected


def needs_order(subscription: Subscription) -> bool:
    if not get_traits(subscription.product_line).reports_needs_order:
        return False
    return subscription.state == SubscriptionState.NEEDS_ORDER


def user(subscription: Subscription) -> Optional[User]:
    return owning_user(subscription.subscriber)


def notification_email(subscription: Subscription) -> Optional[str]:
    source = subscription.payment_source
    return source.email if source else None
