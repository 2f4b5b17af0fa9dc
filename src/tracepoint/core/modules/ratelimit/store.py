"""Storage backends for the sliding-window rate limiter."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol


class RateLimitStore(Protocol):
    """Per-key history of recent action timestamps in epoch milliseconds.

    `lock(key)` serializes a read-modify-write cycle for a single key; other
    keys are not blocked.
    """

    def lock(self, key: str) -> AbstractAsyncContextManager[None]: ...

    async def get(self, key: str) -> list[int]: ...

    async def set(self, key: str, timestamps: list[int]) -> None: ...

    async def prune(self, max_keys: int) -> list[str]: ...


class InMemoryRateLimitStore:
    """Process-local store for single-instance deployments.

    Keys are kept in insertion order; `prune` evicts the oldest-inserted keys
    once more than `max_keys` are tracked.
    """

    def __init__(self) -> None:
        self._history: dict[str, list[int]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Coroutines holding or waiting for each key lock
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        key_lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with key_lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                if key not in self._history:
                    self._locks.pop(key, None)

    async def get(self, key: str) -> list[int]:
        return list(self._history.get(key, []))

    async def set(self, key: str, timestamps: list[int]) -> None:
        self._history[key] = list(timestamps)

    async def prune(self, max_keys: int) -> list[str]:
        evicted: list[str] = []
        while len(self._history) > max_keys:
            key = next(iter(self._history))
            del self._history[key]
            # A lock still held or awaited must survive so later callers share it
            if key not in self._lock_users:
                self._locks.pop(key, None)
            evicted.append(key)
        return evicted

    def __len__(self) -> int:
        return len(self._history)

    def __contains__(self, key: object) -> bool:
        return key in self._history
