"""
Stripe Idempotency Key Generation

Generates deterministic idempotency keys for Stripe API calls so a retried
transition hook cannot create a second provider subscription or charge.

Subscription creation keys carry no time component: a set_payment retried
after a later hook failed must replay the provider subscription created by the
first attempt, however much later the retry happens.
"""

import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


class StripeIdempotencyManager:
    """
    Generates deterministic idempotency keys for Stripe operations.

    Keys are designed to:
    - Be unique per operation + subscription + parameters
    - Include a time bucket where reuse should be limited to a window
    - Prevent duplicate provider objects if the same request is sent twice

    Usage:
        key = stripe_idempotency_manager.generate_subscription_create_key(subscription_id, plan_id)
        sub = await StripeAPIWrapper.create_subscription(idempotency_key=key, ...)
    """

    def generate_key(
        self,
        operation: str,
        subscription_id: str,
        *args,
        time_bucket_minutes: Optional[int] = 60,
        **kwargs
    ) -> str:
        """
        Generate a unique idempotency key.

        Args:
            operation: Operation type (e.g., 'create_subscription', 'one_time_fee')
            subscription_id: Internal subscription identifier
            *args: Additional positional arguments to include in key
            time_bucket_minutes: Time window for key reuse; None for a key that never rolls over
            **kwargs: Additional keyword arguments to include in key

        Returns:
            40-character hex idempotency key
        """
        # Sort kwargs for deterministic ordering
        sorted_kwargs = sorted(kwargs.items())

        components = [
            operation,
            subscription_id,
            *[str(arg) for arg in args],
            *[f"{k}={v}" for k, v in sorted_kwargs],
        ]
        if time_bucket_minutes is not None:
            # Time bucket allows retries within the window
            components.append(str(int(datetime.now(timezone.utc).timestamp() // (time_bucket_minutes * 60))))

        idempotency_base = "_".join(components)
        return hashlib.sha256(idempotency_base.encode()).hexdigest()[:40]

    def generate_subscription_create_key(self, subscription_id: str, plan_id: str) -> str:
        """Generate idempotency key for provider subscription creation."""
        return self.generate_key('create_subscription', subscription_id, plan_id, time_bucket_minutes=None)

    def generate_one_time_fee_key(self, subscription_id: str, amount: int) -> str:
        """Generate idempotency key for a one-time fee invoice item."""
        return self.generate_key('one_time_fee', subscription_id, amount)


# Global instance
stripe_idempotency_manager = StripeIdempotencyManager()


def generate_subscription_create_idempotency_key(subscription_id: str, plan_id: str) -> str:
    return stripe_idempotency_manager.generate_subscription_create_key(subscription_id, plan_id)


def generate_one_time_fee_idempotency_key(subscription_id: str, amount: int) -> str:
    return stripe_idempotency_manager.generate_one_time_fee_key(subscription_id, amount)
