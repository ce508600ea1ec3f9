from __future__ import annotations

from asyncio import Lock
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any


class KeyedLocks:
    """Async mutual exclusion per key, released entries are dropped."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[Any, tuple[Lock, int]] = {}

    async def _acquire_entry(self, key: Any) -> Lock:
        async with self._guard:
            lock, waiters = self._locks.get(key, (None, 0))
            if lock is None:
                lock = Lock()
            self._locks[key] = (lock, waiters + 1)
            return lock

    async def _release_entry(self, key: Any) -> None:
        async with self._guard:
            lock, waiters = self._locks[key]
            if waiters <= 1:
                self._locks.pop(key, None)
            else:
                self._locks[key] = (lock, waiters - 1)

    @asynccontextmanager
    async def hold(self, key: Any) -> AsyncIterator[None]:
        lock = await self._acquire_entry(key)
        try:
            async with lock:
                yield
        finally:
            await self._release_entry(key)

    def is_held(self, key: Any) -> bool:
        entry = self._locks.get(key)
        return bool(entry and entry[0].locked())


# Settlement and reversal of one match never interleave within a process.
match_locks = KeyedLocks()
