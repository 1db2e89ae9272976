"""In-memory cache store - bounded LRU with per-key expiry.

Single-process only; use the Redis store when several workers share sessions.
"""

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable


class InMemoryCacheStore:
    """Async key/value store with TTL and LRU eviction."""

    def __init__(
        self,
        max_size: int = 10_000,
        default_ttl_seconds: int | None = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        if default_ttl_seconds is not None and default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be > 0 or None")
        self._entries: OrderedDict[str, tuple[str, float | None]] = OrderedDict()
        self._max_size = max_size
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._lock = asyncio.Lock()

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._expired(expires_at):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        if ttl is not None and ttl <= 0:
            raise ValueError("ttl_seconds must be > 0")
        expires_at = self._clock() + ttl if ttl is not None else None
        async with self._lock:
            self._entries[key] = (value, expires_at)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def delete_prefix(self, prefix: str) -> int:
        async with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for k in keys:
                del self._entries[k]
            return len(keys)

    def size(self) -> int:
        """Number of stored keys, expired ones included until next access."""
        return len(self._entries)
