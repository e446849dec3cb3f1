# app/core/locks.py
import asyncio
from contextlib import asynccontextmanager
from typing import Dict


class SellerLocks:
    """One asyncio.Lock per vendor id.

    A registry is created once at startup and shared by every request, so
    read -> compute -> write cycles on the same vendor never interleave.
    Different vendors never block each other. A lock only lives while
    someone holds or waits for it.
    """

    def __init__(self, name: str = "default"):
        self.name = name
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def get(self, vendor_id: str) -> asyncio.Lock:
        lock = self._locks.get(vendor_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[vendor_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, vendor_id: str):
        lock = self.get(vendor_id)
        self._users[vendor_id] = self._users.get(vendor_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[vendor_id] -= 1
            if not self._users[vendor_id]:
                del self._users[vendor_id]
                del self._locks[vendor_id]

    def __len__(self) -> int:
        return len(self._locks)


@asynccontextmanager
async def locked_transaction(db, locks: SellerLocks, vendor_id: str):
    """Hold the vendor lock for one unit of work; commit on success, roll back on any error"""
    async with locks.hold(vendor_id):
        try:
            yield
            await db.commit()
        except Exception:
            await db.rollback()
            raise
