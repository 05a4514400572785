"""
Per-subscription locks.

Serializes transitions on the same subscription within one process; the
``lock_version`` check in the repository covers other processes.

A lock only lives while someone holds or waits for it, so the registry stays
as small as the number of subscriptions currently being worked on.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SubscriptionLockRegistry:
    """
    Hands out one ``asyncio.Lock`` per subscription id.

    Usage:
        async with locks.hold(subscription.id):
            ...
    """

    def __init__(self):
        self._entries: Dict[str, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, subscription_id: str) -> AsyncIterator[None]:
        entry = self._entries.get(subscription_id)
        if entry is None:
            entry = _LockEntry()
            self._entries[subscription_id] = entry

        # Counted before waiting so a queued waiter keeps the entry alive
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[subscription_id]

    def __len__(self) -> int:
        return len(self._entries)
