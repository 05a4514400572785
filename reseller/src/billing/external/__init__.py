"""
External integrations for billing.
"""

from .stripe import (
    StripeAPIWrapper,
    CircuitState,
    stripe_circuit_breaker,
    MetadataBuilder,
)

__all__ = [
    'StripeAPIWrapper',
    'CircuitState',
    'stripe_circuit_breaker',
    'MetadataBuilder',
]
