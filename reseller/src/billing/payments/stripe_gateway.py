"""
Stripe Billing Gateway

Implements ``BillingGatewayInterface`` on top of ``StripeAPIWrapper`` and
translates Stripe SDK errors into billing exceptions:
- connection / rate limit / API errors -> GatewayUnavailableError
- any other StripeError -> PaymentError
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

import stripe

from reseller.src.billing.external.stripe import StripeAPIWrapper
from reseller.src.billing.external.stripe.circuit_breaker import STRIPE_OUTAGE_ERRORS
from reseller.src.billing.shared.config import PROVIDER_STATUS_CANCELED
from reseller.src.billing.shared.exceptions import GatewayUnavailableError, PaymentError
from .interfaces import BillingGatewayInterface, ProviderSubscription

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _translate_stripe_errors(operation: str):
    try:
        yield
    except STRIPE_OUTAGE_ERRORS as e:
        logger.error(f"[STRIPE] {operation} failed, provider unavailable: {e}")
        raise GatewayUnavailableError(
            message=f"Stripe unavailable during {operation}",
            details={'stripe_error': str(e)}
        ) from e
    except stripe.StripeError as e:
        logger.error(f"[STRIPE] {operation} rejected: {e}")
        raise PaymentError(
            message=f"Stripe rejected {operation}",
            stripe_error=getattr(e, 'user_message', None) or str(e)
        ) from e


class StripeBillingGateway(BillingGatewayInterface):
    """Billing gateway backed by Stripe subscriptions and invoice items."""

    async def create_subscription(
        self,
        customer_ref: str,
        plan_id: str,
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None
    ) -> ProviderSubscription:
        kwargs = {
            'customer': customer_ref,
            'items': [{'plan': plan_id}],
            'metadata': metadata,
        }
        if idempotency_key:
            kwargs['idempotency_key'] = idempotency_key

        async with _translate_stripe_errors('create_subscription'):
            sub = await StripeAPIWrapper.create_subscription(**kwargs)
        return ProviderSubscription(id=sub.id, status=sub.status)

    async def retrieve_subscription(self, provider_id: str) -> ProviderSubscription:
        async with _translate_stripe_errors('retrieve_subscription'):
            sub = await StripeAPIWrapper.retrieve_subscription(provider_id)
        return ProviderSubscription(id=sub.id, status=sub.status)

    async def cancel_subscription(self, provider_id: str) -> bool:
        current = await self.retrieve_subscription(provider_id)
        if current.status == PROVIDER_STATUS_CANCELED:
            return False
        async with _translate_stripe_errors('cancel_subscription'):
            await StripeAPIWrapper.cancel_subscription(provider_id)
        return True

    async def create_one_time_charge(
        self,
        customer_ref: str,
        amount_minor_units: int,
        currency: str,
        description: Optional[str],
        idempotency_key: Optional[str] = None
    ) -> str:
        kwargs = {
            'customer': customer_ref,
            'amount': amount_minor_units,
            'currency': currency,
            'description': description,
        }
        if idempotency_key:
            kwargs['idempotency_key'] = idempotency_key

        async with _translate_stripe_errors('create_invoice_item'):
            item = await StripeAPIWrapper.create_invoice_item(**kwargs)
        return item.id

    async def update_default_source(self, provider_id: str, source_id: str) -> None:
        async with _translate_stripe_errors('update_default_source'):
            await StripeAPIWrapper.modify_subscription(provider_id, default_source=source_id)

    async def change_plan(self, provider_id: str, plan_id: str) -> None:
        async with _translate_stripe_errors('change_plan'):
            sub = await StripeAPIWrapper.retrieve_subscription(provider_id)
            item_id = sub['items']['data'][0]['id']
            await StripeAPIWrapper.modify_subscription(
                provider_id,
                items=[{'id': item_id, 'plan': plan_id}],
                proration_behavior='create_prorations',
            )
