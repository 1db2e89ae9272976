"""Key/value stores backing the intermediate result cache."""

from coachflow.infrastructure.cache.memory import InMemoryCacheStore

__all__ = ["InMemoryCacheStore"]
