"""
Payments Module

Billing gateway contract, its Stripe implementation and the
subscription-level adapter used by transition hooks.

Usage:
    from reseller.src.billing.payments import BillingGatewayAdapter, StripeBillingGateway

    adapter = BillingGatewayAdapter(StripeBillingGateway())
"""

from .interfaces import BillingGatewayInterface, ProviderSubscription
from .service import BillingGatewayAdapter
from .stripe_gateway import StripeBillingGateway

__all__ = [
    'BillingGatewayInterface',
    'ProviderSubscription',
    'BillingGatewayAdapter',
    'StripeBillingGateway',
]
