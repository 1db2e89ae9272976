"""Intermediate result cache - per-session memo of successful step outcomes.

Best effort only: any store failure is logged and treated as a miss (reads)
or a no-op (writes).
"""

import json
import logging
from typing import Any

from coachflow.domain.ports.cache import CacheStorePort

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


class IntermediateResultCache:
    """Step outcome cache keyed ``workflow:{session_id}:step:{step_id}``."""

    def __init__(self, store: CacheStorePort, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        self._store = store
        self._ttl = ttl_seconds
        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    @staticmethod
    def session_prefix(session_id: str) -> str:
        return f"workflow:{session_id}:step:"

    @classmethod
    def key(cls, session_id: str, step_id: str) -> str:
        return f"{cls.session_prefix(session_id)}{step_id}"

    async def get(self, session_id: str, step_id: str) -> dict[str, Any] | None:
        """Return the cached outcome, or None on miss or store failure."""
        cache_key = self.key(session_id, step_id)
        try:
            raw = await self._store.get(cache_key)
        except Exception as e:
            logger.warning("Failed to retrieve cached result for step %s: %s", step_id, e)
            self._misses += 1
            return None

        if raw is None:
            self._misses += 1
            return None

        try:
            outcome = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Discarding undecodable cached result for step %s: %s", step_id, e)
            self._misses += 1
            return None
        if not isinstance(outcome, dict):
            logger.warning("Discarding non-object cached result for step %s", step_id)
            self._misses += 1
            return None

        self._hits += 1
        return outcome

    async def set(self, session_id: str, step_id: str, outcome: dict[str, Any]) -> None:
        """Store an outcome with the configured TTL. Never raises.

        Values JSON cannot encode (datetimes, sets, custom objects in tool
        results) are stored as their ``str()``, so a cache hit replays a
        payload that differs from the live one. Such writes are logged.
        """
        cache_key = self.key(session_id, step_id)
        stringified: set[str] = set()

        def _stringify(value: Any) -> str:
            stringified.add(type(value).__name__)
            return str(value)

        try:
            payload = json.dumps(outcome, default=_stringify)
            await self._store.set(cache_key, payload, self._ttl)
        except Exception as e:
            logger.warning("Failed to cache intermediate result for step %s: %s", step_id, e)
            return
        if stringified:
            logger.warning(
                "Cached result for step %s stored non-JSON values as strings: %s",
                step_id,
                ", ".join(sorted(stringified)),
            )
        logger.debug("Cached intermediate result for step %s (ttl=%ss)", step_id, self._ttl)

    async def clear_session(self, session_id: str) -> int:
        """Drop every cached step of a session. Returns the number of keys removed."""
        try:
            removed = await self._store.delete_prefix(self.session_prefix(session_id))
        except Exception as e:
            logger.warning("Failed to clear workflow cache for session %s: %s", session_id, e)
            return 0
        logger.debug("Cleared %d cached steps for session %s", removed, session_id)
        return removed

    def get_stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hitRate": self._hits / total if total > 0 else 0.0,
        }
