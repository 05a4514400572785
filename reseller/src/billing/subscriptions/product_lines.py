"""
Product-Line Profiles

Strategy table binding each ``ProductLine`` tag to its transition table, hook
sequences and order orchestrator. One state machine engine serves every line;
the profile is looked up from the subscription's tag at dispatch time.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Tuple

from reseller.src.billing.domain import ProductLine, ProductLineTraits, SubscriptionEvent, get_traits
from reseller.src.billing.orders import BrandOrderOrchestrator, OrderOrchestrator, OrderServiceInterface
from .hooks import CANCEL_HOOKS, RESET_SUBMISSION_HOOKS, SET_PAYMENT_HOOKS
from .transitions import BRAND_TRANSITIONS, GENERIC_TRANSITIONS, Hook, TransitionTable

OrchestratorFactory = Callable[[OrderServiceInterface], OrderOrchestrator]

GENERIC_HOOKS: Dict[SubscriptionEvent, Tuple[Hook, ...]] = {
    SubscriptionEvent.SET_PAYMENT: SET_PAYMENT_HOOKS,
    SubscriptionEvent.CANCEL: CANCEL_HOOKS,
    SubscriptionEvent.RESET_SUBMISSION: RESET_SUBMISSION_HOOKS,
}


@dataclass(frozen=True)
class ProductLineProfile:
    """
    Behavior of one product line.

    Attributes:
        line: Product line tag
        traits: Static flags (tier change, trial, markup display, plans)
        transitions: Event table used to guard transitions
        hooks: Ordered after-transition hooks per event
        orchestrator_factory: Builds the order orchestrator for this line
    """
    line: ProductLine
    traits: ProductLineTraits
    transitions: TransitionTable = field(default_factory=lambda: GENERIC_TRANSITIONS)
    hooks: Mapping[SubscriptionEvent, Tuple[Hook, ...]] = field(default_factory=lambda: GENERIC_HOOKS)
    orchestrator_factory: OrchestratorFactory = OrderOrchestrator

    def hooks_for(self, event: SubscriptionEvent) -> Tuple[Hook, ...]:
        return tuple(self.hooks.get(event, ()))

    def build_orchestrator(self, order_service: OrderServiceInterface) -> OrderOrchestrator:
        return self.orchestrator_factory(order_service)


def _profile(line: ProductLine, **overrides) -> ProductLineProfile:
    return ProductLineProfile(line=line, traits=get_traits(line), **overrides)


PRODUCT_LINE_PROFILES: Dict[ProductLine, ProductLineProfile] = {
    ProductLine.GENERIC: _profile(ProductLine.GENERIC),
    ProductLine.BRAND: _profile(
        ProductLine.BRAND,
        transitions=BRAND_TRANSITIONS,
        orchestrator_factory=BrandOrderOrchestrator,
    ),
    ProductLine.YEXT: _profile(ProductLine.YEXT),
    ProductLine.ADVICE_LOCAL: _profile(ProductLine.ADVICE_LOCAL),
    ProductLine.MONO: _profile(ProductLine.MONO),
    ProductLine.ZIPWHIP: _profile(ProductLine.ZIPWHIP),
}


def get_profile(line: ProductLine) -> ProductLineProfile:
    """Profile for ``line``; unknown lines fall back to the generic profile."""
    return PRODUCT_LINE_PROFILES.get(line, PRODUCT_LINE_PROFILES[ProductLine.GENERIC])
