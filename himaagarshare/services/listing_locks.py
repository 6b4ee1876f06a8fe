"""Per-listing exclusive locks.

Admission is read-then-write: the ledger sum and the insert (or the status
update) must not interleave with another request for the same listing. In
one process that is an ``asyncio.Lock`` per listing id; across worker
processes the ``SELECT ... FOR UPDATE`` on the listing row taken inside the
same transaction does the same job in PostgreSQL.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID


class ListingLockRegistry:
    """One lock per listing id, kept only while someone holds or waits for it."""

    def __init__(self):
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._holders: dict[UUID, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _lock_for(self, listing_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(listing_id)
        if lock is None:
            lock = self._locks.setdefault(listing_id, asyncio.Lock())
        return lock

    @asynccontextmanager
    async def hold(self, listing_id: UUID) -> AsyncIterator[None]:
        """Hold the listing lock; released on every exit path."""
        lock = self._lock_for(listing_id)
        # Counted before the first await so waiters keep the entry alive
        self._holders[listing_id] = self._holders.get(listing_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[listing_id] -= 1
            if not self._holders[listing_id]:
                del self._holders[listing_id]
                del self._locks[listing_id]

    def is_locked(self, listing_id: UUID) -> bool:
        lock = self._locks.get(listing_id)
        return lock is not None and lock.locked()


listing_locks = ListingLockRegistry()
