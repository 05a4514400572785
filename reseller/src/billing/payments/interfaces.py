"""
Payment Interfaces

Provider-agnostic billing gateway contract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class ProviderSubscription:
    """The provider's view of a recurring charge schedule."""
    id: str
    status: str


class BillingGatewayInterface(ABC):
    """Interface every billing provider adapter implements."""

    @abstractmethod
    async def create_subscription(
        self,
        customer_ref: str,
        plan_id: str,
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None
    ) -> ProviderSubscription:
        """Create a recurring subscription for a customer."""
        pass

    @abstractmethod
    async def retrieve_subscription(self, provider_id: str) -> ProviderSubscription:
        """Fetch current provider state."""
        pass

    @abstractmethod
    async def cancel_subscription(self, provider_id: str) -> bool:
        """Cancel now; a no-op returning False when already canceled."""
        pass

    @abstractmethod
    async def create_one_time_charge(
        self,
        customer_ref: str,
        amount_minor_units: int,
        currency: str,
        description: Optional[str],
        idempotency_key: Optional[str] = None
    ) -> str:
        """Add a one-time charge; returns the provider reference."""
        pass

    @abstractmethod
    async def update_default_source(self, provider_id: str, source_id: str) -> None:
        """Switch the payment source billed for a subscription."""
        pass

    @abstractmethod
    async def change_plan(self, provider_id: str, plan_id: str) -> None:
        """Move an existing subscription to another plan."""
        pass
