"""
Subscriber Directory Interface
"""

from abc import ABC, abstractmethod

from reseller.src.billing.domain import Contact


class ContactDirectoryInterface(ABC):
    """Owner of contact records; promotes leads once they subscribe."""

    @abstractmethod
    async def activate_to_client(self, contact: Contact) -> None:
        pass
