"""Cache store port - string key/value store with expiry."""

from typing import Protocol


class CacheStorePort(Protocol):
    """Interface for key/value stores (in-memory, Redis)."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when absent or expired."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store a value; ``ttl_seconds`` of None means the store default."""
        ...

    async def delete(self, key: str) -> None:
        """Remove a key. No-op if missing."""
        ...

    async def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``. Returns the count removed."""
        ...
