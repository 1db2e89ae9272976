"""Circuit breaker for the model backend.

After ``failure_threshold`` consecutive failures the circuit opens and calls
fail fast with CircuitOpenError. Once ``recovery_timeout`` has passed a
trial call is let through (HALF_OPEN); ``success_threshold`` successes close
the circuit again, any failure reopens it.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

logger = logging.getLogger(__name__)
T = TypeVar("T")

_registry_lock = threading.Lock()


class CircuitState(Enum):
    """Breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised instead of calling the backend while the circuit is open."""


@dataclass
class CircuitBreakerConfig:
    """Breaker thresholds."""

    failure_threshold: int = 5
    recovery_timeout: float = 30.0  # seconds
    success_threshold: int = 2

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if self.recovery_timeout <= 0:
            raise ValueError("recovery_timeout must be > 0")
        if self.success_threshold < 1:
            raise ValueError("success_threshold must be >= 1")


@dataclass
class CircuitBreaker:
    """Wraps awaitable calls to one backend.

    Usage:
        breaker = get_circuit_breaker("ollama")
        response = await breaker.call(client.chat, model=..., messages=...)
    """

    name: str
    config: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    clock: Callable[[], float] = time.monotonic

    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    _failure_count: int = field(default=0, init=False)
    _success_count: int = field(default=0, init=False)
    _opened_at: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    @property
    def state(self) -> CircuitState:
        return self._state

    async def _before_call(self) -> None:
        async with self._lock:
            if self._state is not CircuitState.OPEN:
                return
            waited = self.clock() - self._opened_at
            if waited < self.config.recovery_timeout:
                retry_in = self.config.recovery_timeout - waited
                raise CircuitOpenError(f"Circuit '{self.name}' is OPEN. Retry in {retry_in:.1f}s")
            self._state = CircuitState.HALF_OPEN
            self._success_count = 0
            logger.debug("Circuit '%s' transitioned to HALF_OPEN", self.name)

    async def call(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Await ``func(*args, **kwargs)`` through the breaker.

        Raises:
            CircuitOpenError: The circuit is open.
        """
        await self._before_call()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            await self._on_failure()
            raise
        await self._on_success()
        return result

    async def _on_success(self) -> None:
        async with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self.config.success_threshold:
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    self._success_count = 0
                    logger.info("Circuit '%s' transitioned to CLOSED", self.name)
            else:
                self._failure_count = 0

    async def _on_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1
            if self._state is CircuitState.HALF_OPEN or self._failure_count >= self.config.failure_threshold:
                if self._state is not CircuitState.OPEN:
                    logger.warning("Circuit '%s' transitioned to OPEN", self.name)
                self._state = CircuitState.OPEN
                self._opened_at = self.clock()

    def reset(self) -> None:
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at = 0.0

    def get_stats(self) -> dict:
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "success_count": self._success_count,
        }


_breakers: dict[str, CircuitBreaker] = {}


def get_circuit_breaker(name: str, config: CircuitBreakerConfig | None = None) -> CircuitBreaker:
    """Get or create the named breaker (thread-safe)."""
    if name in _breakers:
        return _breakers[name]
    with _registry_lock:
        if name not in _breakers:
            _breakers[name] = CircuitBreaker(name=name, config=config or CircuitBreakerConfig())
        return _breakers[name]


def get_all_breakers() -> dict[str, dict]:
    with _registry_lock:
        return {name: b.get_stats() for name, b in _breakers.items()}


def reset_all_breakers() -> None:
    """Reset every registered breaker (tests)."""
    with _registry_lock:
        for breaker in _breakers.values():
            breaker.reset()
