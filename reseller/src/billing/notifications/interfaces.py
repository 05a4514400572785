"""
Notification Sink Interface

Mail delivery is owned by the surrounding application; subscriptions only
decide *which* notification goes out and when.
"""

from abc import ABC, abstractmethod

from reseller.src.billing.domain import Order, Subscription


class NotificationSinkInterface(ABC):
    """Interface for the notifications a subscription can trigger."""

    @abstractmethod
    async def internal_cancelation_notification(self, subscription: Subscription) -> None:
        """Tell the operator's staff that a subscription was cancelled."""
        pass

    @abstractmethod
    async def vendor_subscription_cancelled(self, subscription: Subscription, order: Order) -> None:
        """Tell the vendor, at the order's cancelation support address."""
        pass

    @abstractmethod
    async def external_payment_notification(self, subscription: Subscription) -> None:
        """Tell the subscriber that a payment was taken."""
        pass
