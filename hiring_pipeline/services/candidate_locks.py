"""Per-candidate mutual exclusion for status transitions.

Each pipeline candidate gets its own asyncio.Lock. Locks are held in a
weak-value map so a candidate's lock disappears once nobody waits on it,
and transitions for different candidates never contend.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable

from hiring_pipeline.errors import ConcurrencyTimeoutError

logger = logging.getLogger(__name__)


class CandidateLockRegistry:
    """Hands out one lock per candidate key."""

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout
        self._locks: "weakref.WeakValueDictionary[Hashable, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the candidate's lock, waiting at most `timeout` seconds for it."""
        lock = self.lock_for(key)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Timed out after %.2fs waiting for transition lock on %s", self.timeout, key)
            raise ConcurrencyTimeoutError(key, self.timeout) from None
        try:
            yield
        finally:
            lock.release()

    def __len__(self) -> int:
        return len(self._locks)
