"""
Order Interfaces

Contract for the service that owns downstream order records.
"""

from abc import ABC, abstractmethod
from typing import Optional

from reseller.src.billing.domain import Order, OrderKind, Subscription


class OrderServiceInterface(ABC):
    """Interface for creating and cancelling orders tied to a subscription."""

    @abstractmethod
    async def find_open_order(self, subscription_id: str, kind: OrderKind) -> Optional[Order]:
        """Pending or active order of ``kind``, if any."""
        pass

    @abstractmethod
    async def latest_order(self, subscription_id: str, kind: OrderKind) -> Optional[Order]:
        """Most recent order of ``kind`` in any status."""
        pass

    @abstractmethod
    async def create_order(self, subscription: Subscription, kind: OrderKind) -> Order:
        """Create an order of ``kind`` for the subscription."""
        pass

    @abstractmethod
    async def cancel_order(self, order: Order) -> Order:
        """Cancel an order and return it updated."""
        pass
