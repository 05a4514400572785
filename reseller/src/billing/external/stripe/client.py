"""
Stripe API Client Wrapper

Provides a safe, circuit-breaker-protected interface to the Stripe API.
All Stripe API calls should go through this wrapper for resilience.
"""

import logging
from typing import Any, Callable, Dict

import stripe

from reseller.core.conf import settings
from .circuit_breaker import stripe_circuit_breaker

logger = logging.getLogger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY
stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES


class StripeAPIWrapper:
    """
    Safe wrapper for Stripe API calls with circuit breaker protection.

    All methods are async class methods that can be called directly:
        sub = await StripeAPIWrapper.create_subscription(customer="cus_123", items=[...])

    The circuit breaker prevents cascading failures when Stripe is down.
    """

    _circuit_breaker = stripe_circuit_breaker
    _http_client_configured = False

    @classmethod
    def _ensure_stripe_available(cls):
        """Raise error if Stripe is not configured."""
        if not stripe.api_key:
            raise ValueError("STRIPE_SECRET_KEY not configured")
        if not cls._http_client_configured:
            # Hooks block their transition, so bound every provider call
            stripe.default_http_client = stripe.HTTPXClient(timeout=settings.STRIPE_TIMEOUT_SECONDS)
            cls._http_client_configured = True

    @classmethod
    async def safe_stripe_call(cls, func: Callable, *args, **kwargs) -> Any:
        """
        Execute a Stripe API call safely with circuit breaker protection.

        Args:
            func: Async Stripe API function
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Result from Stripe API
        """
        cls._ensure_stripe_available()
        return await cls._circuit_breaker.safe_call(func, *args, **kwargs)

    @classmethod
    async def get_circuit_status(cls) -> Dict:
        """Get the current circuit breaker status."""
        return await cls._circuit_breaker.get_status()

    # -------------------------------------------------------------------------
    # Subscription Operations
    # -------------------------------------------------------------------------

    @classmethod
    async def create_subscription(cls, **kwargs) -> 'stripe.Subscription':
        """
        Create a new subscription.

        Args:
            customer: Stripe customer ID
            items: Plan/price items
            metadata: Additional metadata
            idempotency_key: Key protecting against duplicate creation

        Returns:
            Stripe Subscription object
        """
        return await cls.safe_stripe_call(stripe.Subscription.create_async, **kwargs)

    @classmethod
    async def retrieve_subscription(cls, subscription_id: str, **kwargs) -> 'stripe.Subscription':
        """Retrieve a subscription by ID."""
        return await cls.safe_stripe_call(stripe.Subscription.retrieve_async, subscription_id, **kwargs)

    @classmethod
    async def modify_subscription(cls, subscription_id: str, **kwargs) -> 'stripe.Subscription':
        """Modify an existing subscription."""
        return await cls.safe_stripe_call(
            stripe.Subscription.modify_async,
            subscription_id,
            **kwargs
        )

    @classmethod
    async def cancel_subscription(cls, subscription_id: str, **kwargs) -> 'stripe.Subscription':
        """Cancel a subscription immediately."""
        return await cls.safe_stripe_call(stripe.Subscription.cancel_async, subscription_id, **kwargs)

    # -------------------------------------------------------------------------
    # Invoice Item Operations
    # -------------------------------------------------------------------------

    @classmethod
    async def create_invoice_item(cls, **kwargs) -> 'stripe.InvoiceItem':
        """
        Add a one-time charge to the customer's next invoice.

        Args:
            customer: Stripe customer ID
            amount: Amount in cents
            currency: ISO currency code
            description: Line item description
        """
        return await cls.safe_stripe_call(stripe.InvoiceItem.create_async, **kwargs)
