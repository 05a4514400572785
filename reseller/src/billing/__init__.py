"""
Billing Module

Subscription lifecycle for resold products. Integrates with Stripe for
recurring billing and with an external approval workflow for Brand campaigns.

Submodules:
- shared: Constants and exceptions
- domain: Core entities (Subscription, Product, Markup, subscribers, orders)
- pricing: Wholesale, markup, display and payout prices
- external: Payment provider integrations (Stripe)
- payments: Billing gateway contract and adapter
- orders: Order orchestration per product line
- submissions: Campaign approval workflow client
- notifications: Notification sink contract
- subscriptions: State machine, product lines, lifecycle, persistence

Usage:
    from reseller.src.billing import SubscriptionService, SubscriptionEvent

    await service.fire(subscription, SubscriptionEvent.CANCEL)
"""

from .shared import (
    BillingError,
    SubscriptionError,
    InvalidTransitionError,
    IncompleteSubscriptionError,
    ActiveSubscriptionDeletionError,
    OutstandingInvoiceDeletionError,
    GatewayUnavailableError,
    StaleSubscriptionError,
)
from .domain import (
    CycleType,
    Markup,
    ProductLine,
    Subscription,
    SubscriptionEvent,
    SubscriptionState,
)
from .pricing import pricing_engine
from .subscriptions import (
    SubscriptionService,
    SubscriptionStateMachine,
)

__all__ = [
    'BillingError',
    'SubscriptionError',
    'InvalidTransitionError',
    'IncompleteSubscriptionError',
    'ActiveSubscriptionDeletionError',
    'OutstandingInvoiceDeletionError',
    'GatewayUnavailableError',
    'StaleSubscriptionError',
    'CycleType',
    'Markup',
    'ProductLine',
    'Subscription',
    'SubscriptionEvent',
    'SubscriptionState',
    'pricing_engine',
    'SubscriptionService',
    'SubscriptionStateMachine',
]
