"""
Subscriber Entities

A subscription is owned by one of three subscriber kinds. Dispatch always goes
through the ``kind`` tag, never through isinstance checks.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional, Union


class SubscriberKind(str, Enum):
    """Persisted ``subscriber_type`` values."""
    USER = "User"
    CONTACT = "Contact"
    SUBSCRIPTION = "Subscription"


@dataclass
class User:
    id: str
    email: str
    name: Optional[str] = None
    remaining_free_yext_subscriptions: int = 0
    remaining_free_advice_local_subscriptions: int = 0
    kind: SubscriberKind = field(default=SubscriberKind.USER, init=False)


@dataclass
class Contact:
    """An end customer of a reseller user."""
    id: str
    user: User
    eligible_promotions: FrozenSet[str] = frozenset()
    status: str = 'lead'
    kind: SubscriberKind = field(default=SubscriberKind.CONTACT, init=False)

    def eligible_for_promotion(self, promotion: str) -> bool:
        return promotion in self.eligible_promotions

    def is_client(self) -> bool:
        return self.status == 'client'


@dataclass
class SubscriptionSubscriber:
    """A parent subscription acting as subscriber (bundled add-ons)."""
    id: str
    user: User
    created_at: datetime
    kind: SubscriberKind = field(default=SubscriberKind.SUBSCRIPTION, init=False)


Subscriber = Union[User, Contact, SubscriptionSubscriber]


def owning_user(subscriber: Optional[Subscriber]) -> Optional[User]:
    """The user behind any subscriber kind."""
    if subscriber is None:
        return None
    if subscriber.kind is SubscriberKind.USER:
        return subscriber
    return subscriber.user
