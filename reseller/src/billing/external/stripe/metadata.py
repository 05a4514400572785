"""
Stripe Metadata Builder

Builds the metadata attached to every provider subscription so Stripe
objects can be traced back to the internal subscription.
"""

from typing import Dict

from reseller.src.billing.domain import Subscription


class MetadataBuilder:
    """Stripe metadata values must be strings."""

    @classmethod
    def process(cls, subscription: Subscription) -> Dict[str, str]:
        metadata = {
            'subscription_id': str(subscription.id),
            'product_id': str(subscription.product.id),
            'product_line': subscription.product_line.value,
            'subscriber_type': subscription.subscriber.kind.value,
            'subscriber_id': str(subscription.subscriber.id),
        }
        if subscription.product_tier is not None:
            metadata['product_tier_id'] = str(subscription.product_tier.id)
        return metadata
