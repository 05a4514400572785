"""
Subscription Domain Entity

A purchased product subscription with lifecycle state, pricing references and
billing provider linkage. State only changes through
``reseller.src.billing.subscriptions.state_machine``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional

from .catalog import Markup, PaymentSource, Product, ProductTier
from .order import Campaign
from .product_line import ProductLine
from .subscriber import Subscriber


class SubscriptionState(str, Enum):
    """Lifecycle states, persisted as their string value."""
    DRAFT = "draft"
    NEEDS_MARKUP = "needs_markup"
    NEEDS_ORDER = "needs_order"
    PAYMENT_NEEDED = "payment_needed"
    NEEDS_SUBMISSION = "needs_submission"
    ACTIVE = "active"
    SUBMISSION_FAILED = "submission_failed"
    CANCELLED = "cancelled"


class SubscriptionEvent(str, Enum):
    ACTIVATE = "activate"
    SET_MARKUP = "set_markup"
    SET_ORDER = "set_order"
    SET_PAYMENT = "set_payment"
    SET_SUBMISSION_FAILURE = "set_submission_failure"
    RESET_SUBMISSION = "reset_submission"
    CANCEL = "cancel"
    REACTIVATE = "reactivate"


class CycleType(IntEnum):
    """Billing cycle, persisted as a 0-based integer."""
    YEARLY = 0
    MONTHLY = 1
    MONTHLY_COMMITMENT = 2


@dataclass
class Subscription:
    """
    Represents a subscriber's purchase of a product tier.

    Attributes:
        id: Internal subscription ID
        product_line: Tag selecting line-specific behavior
        product: Purchased product
        subscriber: User, Contact or parent subscription
        product_tier: Selected tier (nullable until chosen)
        payment_source: Card/customer used for billing
        cycle_type: Yearly, monthly or monthly with commitment
        state: Current lifecycle state
        price: Charged price in cents, set when the provider subscription is created
        markup: Reseller margin, if any
        campaign: Brand campaign, if any
        provider_subscription_id: Billing provider reference, set at most once
        activation_date: When payment was taken
        renewal_date: Next renewal
        canceled_at: When the subscription was cancelled
        trial_ends_at: End of the trial window
        deleted_at: Tombstone; set instead of physically deleting
        lock_version: Optimistic lock counter, bumped on every commit
    """
    id: str
    product_line: ProductLine
    product: Product
    subscriber: Subscriber
    product_tier: Optional[ProductTier] = None
    payment_source: Optional[PaymentSource] = None
    cycle_type: CycleType = CycleType.MONTHLY
    state: SubscriptionState = SubscriptionState.DRAFT
    price: Optional[int] = None
    markup: Optional[Markup] = None
    campaign: Optional[Campaign] = None
    provider_subscription_id: Optional[str] = None
    activation_date: Optional[datetime] = None
    renewal_date: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    lock_version: int = field(default=0)

    @property
    def yearly(self) -> bool:
        return self.cycle_type == CycleType.YEARLY

    @property
    def monthly(self) -> bool:
        return self.cycle_type == CycleType.MONTHLY

    @property
    def monthly_commitment(self) -> bool:
        return self.cycle_type == CycleType.MONTHLY_COMMITMENT

    @property
    def soft_deleted(self) -> bool:
        return self.deleted_at is not None

    def is_active(self) -> bool:
        return self.state == SubscriptionState.ACTIVE

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'id': self.id,
            'product_line': self.product_line.value,
            'product_id': self.product.id,
            'product_tier_id': self.product_tier.id if self.product_tier else None,
            'subscriber_type': self.subscriber.kind.value,
            'subscriber_id': self.subscriber.id,
            'state': self.state.value,
            'cycle_type': int(self.cycle_type),
            'price': self.price,
            'markup_total': self.markup.total if self.markup else None,
            'provider_subscription_id': self.provider_subscription_id,
            'activation_date': self.activation_date.isoformat() if self.activation_date else None,
            'renewal_date': self.renewal_date.isoformat() if self.renewal_date else None,
            'canceled_at': self.canceled_at.isoformat() if self.canceled_at else None,
            'trial_ends_at': self.trial_ends_at.isoformat() if self.trial_ends_at else None,
            'deleted': self.soft_deleted,
        }
