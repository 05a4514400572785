"""
Stripe Integration Module

Provides the Stripe integration used by the billing gateway:
- Circuit breaker for API resilience
- Async API wrapper for subscriptions and invoice items
- Idempotency key generation
- Subscription metadata

Usage:
    from reseller.src.billing.external.stripe import (
        StripeAPIWrapper,
        generate_subscription_create_idempotency_key,
    )

    sub = await StripeAPIWrapper.create_subscription(
        customer='cus_xxx',
        items=[{'plan': 'plan_xxx'}],
        idempotency_key=generate_subscription_create_idempotency_key(subscription_id, 'plan_xxx'),
    )
"""

from .circuit_breaker import (
    CircuitState,
    StripeCircuitBreaker,
    stripe_circuit_breaker,
)

from .client import StripeAPIWrapper

from .idempotency import (
    StripeIdempotencyManager,
    stripe_idempotency_manager,
    generate_subscription_create_idempotency_key,
    generate_one_time_fee_idempotency_key,
)

from .metadata import MetadataBuilder

__all__ = [
    'CircuitState',
    'StripeCircuitBreaker',
    'stripe_circuit_breaker',
    'StripeAPIWrapper',
    'StripeIdempotencyManager',
    'stripe_idempotency_manager',
    'generate_subscription_create_idempotency_key',
    'generate_one_time_fee_idempotency_key',
    'MetadataBuilder',
]
