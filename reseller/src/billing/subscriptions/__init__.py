"""
Subscriptions Module

Subscription lifecycle management for the billing system.

Components:
- SubscriptionService: Main entry point
- SubscriptionStateMachine: Guarded transitions with ordered hooks
- Product-line profiles: Per-line transition table, hooks and order orchestrator
- LifecycleHandler: Destroy, tier change, payment source change
- TrialService: Trial window

Usage:
    from reseller.src.billing.subscriptions import SubscriptionService

    service = SubscriptionService.from_settings(repository, order_service, notifications)
    await service.set_payment(subscription)
"""

from .interfaces import ContactDirectoryInterface
from .lifecycle import (
    LifecycleHandler,
    about_to_expire,
    comped,
    needs_order,
    notification_email,
    user,
)
from .locks import SubscriptionLockRegistry
from .product_lines import PRODUCT_LINE_PROFILES, ProductLineProfile, get_profile
from .repository import (
    ReferenceLoader,
    SqlAlchemySubscriptionRepository,
    SubscriptionReferences,
    SubscriptionRepository,
)
from .service import SubscriptionService
from .state_machine import SubscriptionStateMachine
from .transitions import (
    BRAND_TRANSITIONS,
    GENERIC_TRANSITIONS,
    TransitionContext,
    TransitionRule,
)
from .trial_service import (
    TrialService,
    trial_service,
    remaining_trial_days,
    trial_active,
)

__all__ = [
    # Main service
    'SubscriptionService',
    # State machine
    'SubscriptionStateMachine',
    'SubscriptionLockRegistry',
    'TransitionContext',
    'TransitionRule',
    'GENERIC_TRANSITIONS',
    'BRAND_TRANSITIONS',
    # Product lines
    'ProductLineProfile',
    'PRODUCT_LINE_PROFILES',
    'get_profile',
    # Lifecycle
    'LifecycleHandler',
    'ContactDirectoryInterface',
    'about_to_expire',
    'comped',
    'needs_order',
    'notification_email',
    'user',
    # Persistence
    'SubscriptionRepository',
    'SqlAlchemySubscriptionRepository',
    'SubscriptionReferences',
    'ReferenceLoader',
    # Trial
    'TrialService',
    'trial_service',
    'remaining_trial_days',
    'trial_active',
]
