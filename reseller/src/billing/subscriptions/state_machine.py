"""
Subscription State Machine

Single engine for every product line:
1. Guard: the event must have a rule whose sources contain the current state
2. Hooks: run in declared order against a working copy already in the target state
3. Commit: compare-and-swap on ``lock_version``; only then is the caller's
   subscription updated

A hook failure or a lost compare-and-swap leaves the caller's subscription,
and the stored record, exactly as they were.
"""

import copy
import logging
from dataclasses import fields
from datetime import datetime
from typing import Callable, List, Optional

from reseller.src.billing.domain import Subscription, SubscriptionEvent
from reseller.src.billing.notifications import NotificationSinkInterface
from reseller.src.billing.orders import OrderServiceInterface
from reseller.src.billing.payments import BillingGatewayAdapter
from reseller.src.billing.shared.exceptions import InvalidTransitionError
from reseller.utils.timezone import timezone
from .locks import SubscriptionLockRegistry
from .product_lines import ProductLineProfile, get_profile
from .repository import SubscriptionRepository
from .transitions import TransitionContext, TransitionRule, resolve

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Prepare = Callable[[Subscription], None]


def copy_committed_fields(source: Subscription, target: Subscription) -> Subscription:
    """Copy every field of a committed working copy onto the caller's object."""
    for f in fields(Subscription):
        setattr(target, f.name, getattr(source, f.name))
    return target


async def commit(
    repository: SubscriptionRepository,
    working: Subscription,
    original: Subscription
) -> Subscription:
    """Persist ``working`` against the version ``original`` was loaded at."""
    await repository.save(working, expected_version=original.lock_version)
    return copy_committed_fields(working, original)


class SubscriptionStateMachine:
    """
    Fires lifecycle events on subscriptions.

    Usage:
        machine = SubscriptionStateMachine(repository, gateway, order_service, notifications)
        await machine.fire(subscription, SubscriptionEvent.SET_PAYMENT)
    """

    def __init__(
        self,
        repository: SubscriptionRepository,
        gateway: BillingGatewayAdapter,
        order_service: OrderServiceInterface,
        notifications: NotificationSinkInterface,
        locks: Optional[SubscriptionLockRegistry] = None,
        clock: Optional[Clock] = None
    ):
        self.repository = repository
        self.gateway = gateway
        self.order_service = order_service
        self.notifications = notifications
        self.locks = locks or SubscriptionLockRegistry()
        self.clock = clock or timezone.now

    @staticmethod
    def profile_for(subscription: Subscription) -> ProductLineProfile:
        return get_profile(subscription.product_line)

    def rule_for(self, subscription: Subscription, event: SubscriptionEvent) -> Optional[TransitionRule]:
        profile = self.profile_for(subscription)
        return resolve(profile.transitions, SubscriptionEvent(event), subscription.state)

    def can_fire(self, subscription: Subscription, event: SubscriptionEvent) -> bool:
        return self.rule_for(subscription, event) is not None

    def available_events(self, subscription: Subscription) -> List[SubscriptionEvent]:
        profile = self.profile_for(subscription)
        return [
            event for event in profile.transitions
            if resolve(profile.transitions, event, subscription.state) is not None
        ]

    async def fire(
        self,
        subscription: Subscription,
        event: SubscriptionEvent,
        prepare: Optional[Prepare] = None
    ) -> Subscription:
        """
        Fire ``event`` and commit the resulting state with every hook mutation.

        ``prepare`` edits the working copy once the guard has passed, so field
        changes that come with the event are committed together with it.

        Raises:
            InvalidTransitionError: event not allowed from the current state
            StaleSubscriptionError: another writer committed first
            BillingError: any hook failure, unchanged
        """
        event = SubscriptionEvent(event)
        async with self.locks.hold(subscription.id):
            return await self._fire(subscription, event, prepare)

    async def _fire(
        self,
        subscription: Subscription,
        event: SubscriptionEvent,
        prepare: Optional[Prepare]
    ) -> Subscription:
        profile = self.profile_for(subscription)
        from_state = subscription.state

        rule = resolve(profile.transitions, event, from_state)
        if rule is None:
            logger.warning(
                f"[FSM] Rejected {event.value} for {subscription.id} in state {from_state.value}"
            )
            raise InvalidTransitionError(
                event=event.value,
                current_state=from_state.value,
                subscription_id=subscription.id
            )

        working = copy.deepcopy(subscription)
        working.state = rule.target
        if prepare is not None:
            prepare(working)
        ctx = TransitionContext(
            subscription=working,
            event=event,
            from_state=from_state,
            to_state=rule.target,
            profile=profile,
            gateway=self.gateway,
            orders=profile.build_orchestrator(self.order_service),
            notifications=self.notifications,
            now=self.clock(),
        )

        for hook in profile.hooks_for(event):
            try:
                await hook(ctx)
            except Exception:
                logger.error(
                    f"[FSM] {hook.__name__} aborted {event.value} for {subscription.id}, "
                    f"state stays {from_state.value}",
                    exc_info=True
                )
                raise

        await commit(self.repository, working, subscription)
        logger.info(
            f"[FSM] {subscription.id}: {from_state.value} -> {rule.target.value} on {event.value}"
        )
        return subscription
