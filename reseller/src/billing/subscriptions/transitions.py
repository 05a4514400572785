"""
Transition Table

States and events are enum tags; each event maps to an ordered tuple of
rules. The first rule whose source set contains the current state decides the
target. ``set_order`` carries two rules: it moves an order-less subscription to
payment, and it activates a subscription whose submission was acknowledged.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, FrozenSet, Optional, Tuple

from reseller.src.billing.domain import Subscription, SubscriptionEvent, SubscriptionState

if TYPE_CHECKING:
    from reseller.src.billing.notifications import NotificationSinkInterface
    from reseller.src.billing.orders import OrderOrchestrator
    from reseller.src.billing.payments import BillingGatewayAdapter
    from .product_lines import ProductLineProfile


@dataclass(frozen=True)
class TransitionRule:
    sources: FrozenSet[SubscriptionState]
    target: SubscriptionState


TransitionTable = Dict[SubscriptionEvent, Tuple[TransitionRule, ...]]


def _rule(sources, target: SubscriptionState) -> TransitionRule:
    return TransitionRule(sources=frozenset(sources), target=target)


S = SubscriptionState
E = SubscriptionEvent

GENERIC_TRANSITIONS: TransitionTable = {
    E.ACTIVATE: (_rule([S.DRAFT], S.NEEDS_MARKUP),),
    E.SET_MARKUP: (_rule([S.NEEDS_MARKUP], S.NEEDS_ORDER),),
    E.SET_ORDER: (
        _rule([S.NEEDS_ORDER], S.PAYMENT_NEEDED),
        _rule([S.NEEDS_SUBMISSION, S.SUBMISSION_FAILED], S.ACTIVE),
    ),
    E.SET_PAYMENT: (_rule([S.PAYMENT_NEEDED], S.NEEDS_SUBMISSION),),
    E.SET_SUBMISSION_FAILURE: (_rule([S.NEEDS_SUBMISSION], S.SUBMISSION_FAILED),),
    E.RESET_SUBMISSION: (_rule([S.SUBMISSION_FAILED], S.NEEDS_SUBMISSION),),
    E.CANCEL: (_rule([S.ACTIVE], S.CANCELLED),),
    E.REACTIVATE: (_rule([S.CANCELLED], S.ACTIVE),),
}

# Brand keeps every generic event and guard; only its hooks differ.
BRAND_TRANSITIONS: TransitionTable = dict(GENERIC_TRANSITIONS)


def resolve(
    table: TransitionTable,
    event: SubscriptionEvent,
    state: SubscriptionState
) -> Optional[TransitionRule]:
    """First rule of ``event`` whose sources contain ``state``, if any."""
    for rule in table.get(event, ()):
        if state in rule.sources:
            return rule
    return None


@dataclass
class TransitionContext:
    """
    Everything a hook may touch during one transition.

    ``subscription`` is a working copy already carrying ``to_state``; it is
    only written back to the caller's object once the transition commits.
    """
    subscription: Subscription
    event: SubscriptionEvent
    from_state: SubscriptionState
    to_state: SubscriptionState
    profile: "ProductLineProfile"
    gateway: "BillingGatewayAdapter"
    orders: "OrderOrchestrator"
    notifications: "NotificationSinkInterface"
    now: datetime


Hook = Callable[[TransitionContext], Awaitable[None]]
