"""
Subscription Service

Main entry point for subscription operations. Provides a unified interface for:
- Creating and loading subscriptions
- Firing lifecycle events (activation, markup, order, payment, cancel, reactivate)
- Brand campaign submission and acknowledgment
- Trials, one-time fees, payment source and tier changes
- Destroy (tombstone)

Collaborators are injected; ``SubscriptionService.from_settings`` wires the
Stripe gateway and the approval workflow client from process configuration.
"""

import copy
import logging
from typing import Dict, Optional

from reseller.src.billing.domain import (
    Campaign,
    Markup,
    PaymentSource,
    ProductTier,
    SubscriberKind,
    Subscription,
    SubscriptionEvent,
    SubscriptionState,
)
from reseller.src.billing.notifications import NotificationSinkInterface
from reseller.src.billing.orders import OrderServiceInterface
from reseller.src.billing.payments import BillingGatewayAdapter, StripeBillingGateway
from reseller.src.billing.pricing import pricing_engine
from reseller.src.billing.shared.exceptions import InvalidTransitionError, SubscriptionError
from reseller.src.billing.submissions import SubmitService
from .interfaces import ContactDirectoryInterface
from .lifecycle import LifecycleHandler
from .locks import SubscriptionLockRegistry
from .repository import SubscriptionRepository
from .state_machine import Clock, SubscriptionStateMachine, commit
from .trial_service import TrialService

logger = logging.getLogger(__name__)

ACKNOWLEDGEABLE_STATES = frozenset({
    SubscriptionState.NEEDS_SUBMISSION,
    SubscriptionState.SUBMISSION_FAILED,
})


class SubscriptionService:
    """
    Unified subscription management service.

    Usage:
        service = SubscriptionService.from_settings(repository, order_service, notifications)

        subscription = await service.create_subscription(subscription)
        await service.activate(subscription)
        await service.apply_markup(subscription, Markup(percentage=20))
    """

    def __init__(
        self,
        repository: SubscriptionRepository,
        gateway: BillingGatewayAdapter,
        order_service: OrderServiceInterface,
        notifications: NotificationSinkInterface,
        submit_service: Optional[SubmitService] = None,
        contact_directory: Optional[ContactDirectoryInterface] = None,
        clock: Optional[Clock] = None
    ):
        self.repository = repository
        self.gateway = gateway
        self.notifications = notifications
        self.submit_service = submit_service
        self.contact_directory = contact_directory
        self.locks = SubscriptionLockRegistry()
        self.state_machine = SubscriptionStateMachine(
            repository=repository,
            gateway=gateway,
            order_service=order_service,
            notifications=notifications,
            locks=self.locks,
            clock=clock,
        )
        self.clock = self.state_machine.clock
        self.lifecycle = LifecycleHandler(repository, gateway, locks=self.locks)
        self.trials = TrialService()

    @classmethod
    def from_settings(
        cls,
        repository: SubscriptionRepository,
        order_service: OrderServiceInterface,
        notifications: NotificationSinkInterface,
        contact_directory: Optional[ContactDirectoryInterface] = None
    ) -> "SubscriptionService":
        return cls(
            repository=repository,
            gateway=BillingGatewayAdapter(StripeBillingGateway()),
            order_service=order_service,
            notifications=notifications,
            submit_service=SubmitService.from_settings(),
            contact_directory=contact_directory,
        )

    # =========================================================================
    # Creation & Lookup
    # =========================================================================

    async def create_subscription(self, subscription: Subscription) -> Subscription:
        """
        Store a new subscription in ``draft``.

        A contact subscribing is promoted to a client.
        """
        if subscription.state != SubscriptionState.DRAFT:
            raise SubscriptionError(
                message="New subscriptions start in draft",
                code="INVALID_INITIAL_STATE",
                subscription_id=subscription.id
            )

        if subscription.created_at is None:
            subscription.created_at = self.clock()
        if subscription.markup is not None:
            pricing_engine.set_markup_total(subscription)

        await self.repository.add(subscription)
        logger.info(
            f"[LIFECYCLE] Created {subscription.product_line.value} subscription {subscription.id}"
        )

        subscriber = subscription.subscriber
        if subscriber.kind is SubscriberKind.CONTACT and self.contact_directory is not None:
            await self.contact_directory.activate_to_client(subscriber)
            logger.info(f"[LIFECYCLE] Contact {subscriber.id} promoted to client")

        return subscription

    async def get(self, subscription_id: str, with_deleted: bool = False) -> Subscription:
        return await self.repository.get(subscription_id, with_deleted=with_deleted)

    # =========================================================================
    # Lifecycle Events
    # =========================================================================

    async def fire(self, subscription: Subscription, event: SubscriptionEvent) -> Subscription:
        return await self.state_machine.fire(subscription, event)

    async def fire_by_id(self, subscription_id: str, event: SubscriptionEvent) -> Subscription:
        subscription = await self.get(subscription_id)
        return await self.state_machine.fire(subscription, event)

    async def activate(self, subscription: Subscription) -> Subscription:
        return await self.fire(subscription, SubscriptionEvent.ACTIVATE)

    async def apply_markup(self, subscription: Subscription, markup: Markup) -> Subscription:
        """Attach a markup, compute its total, and move on to ordering."""
        def attach(working: Subscription) -> None:
            working.markup = markup
            pricing_engine.set_markup_total(working)

        return await self.state_machine.fire(subscription, SubscriptionEvent.SET_MARKUP, prepare=attach)

    async def place_order(self, subscription: Subscription) -> Subscription:
        return await self.fire(subscription, SubscriptionEvent.SET_ORDER)

    async def set_payment(self, subscription: Subscription) -> Subscription:
        return await self.fire(subscription, SubscriptionEvent.SET_PAYMENT)

    async def cancel(self, subscription: Subscription) -> Subscription:
        return await self.fire(subscription, SubscriptionEvent.CANCEL)

    async def reactivate(self, subscription: Subscription) -> Subscription:
        return await self.fire(subscription, SubscriptionEvent.REACTIVATE)

    async def mark_submission_failed(self, subscription: Subscription) -> Subscription:
        return await self.fire(subscription, SubscriptionEvent.SET_SUBMISSION_FAILURE)

    async def reset_submission(self, subscription: Subscription) -> Subscription:
        return await self.fire(subscription, SubscriptionEvent.RESET_SUBMISSION)

    # =========================================================================
    # Campaign Submission
    # =========================================================================

    async def submit_campaign(self, subscription: Subscription) -> Subscription:
        """
        Send the subscription's campaign for approval.

        Acceptance activates the subscription. Errors from the approval
        workflow propagate unchanged and leave the state as it was.
        """
        if self.submit_service is None:
            raise SubscriptionError(
                message="No submission workflow configured",
                code="SUBMISSION_NOT_CONFIGURED",
                subscription_id=subscription.id
            )
        if subscription.campaign is None:
            raise SubscriptionError(
                message="Subscription has no campaign to submit",
                code="MISSING_CAMPAIGN",
                subscription_id=subscription.id
            )
        self._ensure_acknowledgeable(subscription)

        async def acknowledge(campaign: Campaign) -> None:
            await self.acknowledge_submission(subscription, campaign)

        await self.submit_service.process(subscription.campaign, on_acknowledged=acknowledge)
        return subscription

    async def acknowledge_submission(self, subscription: Subscription, campaign: Campaign) -> Subscription:
        """Record the workflow's acceptance and activate the subscription."""
        self._ensure_acknowledgeable(subscription)
        submitted_at = self.clock()

        def stamp(working: Subscription) -> None:
            if working.campaign is not None:
                working.campaign.submitted_at = submitted_at

        logger.info(f"[SUBMIT] Acknowledged campaign {campaign.campaign_code} for {subscription.id}")
        return await self.state_machine.fire(subscription, SubscriptionEvent.SET_ORDER, prepare=stamp)

    @staticmethod
    def _ensure_acknowledgeable(subscription: Subscription) -> None:
        # set_order from needs_order means "order placed", not "submission accepted"
        if subscription.state not in ACKNOWLEDGEABLE_STATES:
            raise InvalidTransitionError(
                event=SubscriptionEvent.SET_ORDER.value,
                current_state=subscription.state.value,
                subscription_id=subscription.id
            )

    # =========================================================================
    # Billing
    # =========================================================================

    async def charge_one_time_fee(self, subscription: Subscription) -> Optional[str]:
        return await self.gateway.charge_one_time_fee(subscription)

    async def update_payment_source(self, subscription: Subscription, new_source: PaymentSource) -> Subscription:
        return await self.lifecycle.update_payment_source(subscription, new_source)

    async def change_tier(self, subscription: Subscription, new_tier: ProductTier) -> Dict:
        return await self.lifecycle.change_tier(subscription, new_tier)

    async def send_external_payment_notification(self, subscription: Subscription) -> None:
        await self.notifications.external_payment_notification(subscription)

    # =========================================================================
    # Trials
    # =========================================================================

    async def start_trial(self, subscription: Subscription) -> Subscription:
        """
        Start the product line's trial window.

        Raises:
            TrialError: the line does not offer trials
        """
        async with self.locks.hold(subscription.id):
            working = copy.deepcopy(subscription)
            self.trials.start_trial(working, now=self.clock())
            await commit(self.repository, working, subscription)
        return subscription

    def remaining_trial_days(self, subscription: Subscription) -> int:
        return self.trials.remaining_trial_days(subscription, now=self.clock())

    def trial_active(self, subscription: Subscription) -> bool:
        return self.trials.trial_active(subscription, now=self.clock())

    # =========================================================================
    # Destroy
    # =========================================================================

    async def destroy(self, subscription: Subscription) -> Subscription:
        return await self.lifecycle.destroy(subscription, now=self.clock())
