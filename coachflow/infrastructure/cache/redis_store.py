"""Redis cache store - shared across processes."""

import re

from redis import asyncio as aioredis

_SCAN_BATCH = 500
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _escape_glob(text: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisCacheStore:
    """Async Redis implementation of CacheStorePort."""

    def __init__(self, url: str = "redis://localhost:6379/0", default_ttl_seconds: int | None = 3600) -> None:
        if default_ttl_seconds is not None and default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be > 0 or None")
        self._client = aioredis.from_url(url, decode_responses=True)
        self._default_ttl = default_ttl_seconds

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        if ttl is not None and ttl <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if ttl is not None:
            await self._client.set(key, value, ex=ttl)
        else:
            await self._client.set(key, value)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def delete_prefix(self, prefix: str) -> int:
        """Delete keys matching ``prefix*`` using SCAN (never KEYS)."""
        removed = 0
        batch: list[str] = []
        async for key in self._client.scan_iter(match=f"{_escape_glob(prefix)}*", count=_SCAN_BATCH):
            batch.append(key)
            if len(batch) >= _SCAN_BATCH:
                removed += await self._client.delete(*batch)
                batch.clear()
        if batch:
            removed += await self._client.delete(*batch)
        return removed

    async def close(self) -> None:
        await self._client.aclose()
