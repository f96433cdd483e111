"""Circuit Breaker pattern for guarding upstream dependencies.

State transitions:
CLOSED (normal) → [failure_threshold consecutive failures] → OPEN (blocked)
OPEN → [reset_timeout since last failure] → HALF_OPEN (one probe)
HALF_OPEN → [success] → CLOSED
HALF_OPEN → [failure] → OPEN (failure count keeps accumulating)

Breaker state is keyed by name inside a CircuitBreakerRegistry, so every
breaker obtained for the same name from the same registry shares state.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ..config.constants import DEFAULT_FAILURE_THRESHOLD, DEFAULT_RESET_TIMEOUT
from ..core.errors import CircuitOpenError
from ..observability.logger import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, rejecting calls
    HALF_OPEN = "half_open"  # Probing for recovery


@dataclass
class BreakerState:
    """Mutable per-dependency state shared by all breakers of one name."""

    name: str
    consecutive_failures: int = 0
    last_failure_time: float = 0.0
    state: CircuitState = CircuitState.CLOSED


class CircuitBreaker:
    """Circuit breaker for one named dependency.

    Usage:
        breaker = registry.get("news", failure_threshold=3, reset_timeout=60)
        result = await breaker.execute(news_source.fetch)
    """

    def __init__(
        self,
        state: BreakerState,
        *,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        reset_timeout: float = DEFAULT_RESET_TIMEOUT,
        clock: Clock = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if reset_timeout < 0:
            raise ValueError("reset_timeout must not be negative")
        self._state = state
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock

    @property
    def name(self) -> str:
        return self._state.name

    @property
    def state(self) -> CircuitState:
        """Get current circuit state."""
        return self._state.state

    @property
    def consecutive_failures(self) -> int:
        return self._state.consecutive_failures

    @property
    def is_closed(self) -> bool:
        return self._state.state == CircuitState.CLOSED

    @property
    def is_open(self) -> bool:
        return self._state.state == CircuitState.OPEN

    def retry_after(self) -> float:
        """Seconds until an OPEN breaker lets a probe through (0 if not blocking)."""
        if self._state.state != CircuitState.OPEN:
            return 0.0
        elapsed = self._clock() - self._state.last_failure_time
        return max(0.0, self.reset_timeout - elapsed)

    async def execute(
        self,
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Execute function with circuit breaker protection.

        Args:
            func: Async or sync function to execute
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Function result

        Raises:
            CircuitOpenError: If circuit is open and still cooling down
            Original exception: If function fails
        """
        self._check_state()

        try:
            result = func(*args, **kwargs)
            if asyncio.iscoroutine(result):
                result = await result
        except Exception:
            self.record_failure()
            raise

        self.record_success()
        return result

    def _check_state(self) -> None:
        """Allow or reject a call, moving OPEN to HALF_OPEN once cooled down."""
        if self._state.state != CircuitState.OPEN:
            return

        remaining = self.retry_after()
        if remaining > 0:
            raise CircuitOpenError(
                f"Circuit breaker {self.name} is OPEN. Retry in {remaining:.0f}s",
                breaker=self.name,
                retry_after=remaining,
            )

        logger.info(
            f"Circuit breaker {self.name} entering HALF_OPEN state",
            extra={"breaker": self.name, "reset_timeout": self.reset_timeout},
        )
        self._state.state = CircuitState.HALF_OPEN

    def record_success(self) -> None:
        """Record a successful call."""
        if self._state.consecutive_failures > 0 or self._state.state != CircuitState.CLOSED:
            logger.info(
                f"Circuit breaker {self.name} closed after success",
                extra={
                    "breaker": self.name,
                    "previous_failures": self._state.consecutive_failures,
                },
            )
        self._state.consecutive_failures = 0
        self._state.state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Record a failed call."""
        self._state.consecutive_failures += 1
        self._state.last_failure_time = self._clock()

        if self._state.consecutive_failures >= self.failure_threshold:
            if self._state.state != CircuitState.OPEN:
                logger.warning(
                    f"Circuit breaker {self.name} OPENED after "
                    f"{self._state.consecutive_failures} failures",
                    extra={
                        "breaker": self.name,
                        "failure_count": self._state.consecutive_failures,
                    },
                )
            self._state.state = CircuitState.OPEN

    def reset(self) -> None:
        """Reset circuit breaker to initial state."""
        self._state.state = CircuitState.CLOSED
        self._state.consecutive_failures = 0
        self._state.last_failure_time = 0.0
        logger.info(f"Circuit breaker {self.name} reset to CLOSED state")

    def snapshot(self) -> dict[str, Any]:
        """Point-in-time view for health reporting."""
        return {
            "name": self.name,
            "state": self.state.value,
            "consecutive_failures": self.consecutive_failures,
            "failure_threshold": self.failure_threshold,
            "retry_after_seconds": round(self.retry_after(), 1),
        }


class CircuitBreakerRegistry:
    """Owns the per-name breaker state for one process (or one test).

    Usage:
        registry = CircuitBreakerRegistry(failure_threshold=3, reset_timeout=60)
        news = registry.get("news")
        assert registry.get("news").state is news.state
    """

    def __init__(
        self,
        *,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        reset_timeout: float = DEFAULT_RESET_TIMEOUT,
        clock: Clock = time.monotonic,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._states: dict[str, BreakerState] = {}
        self._settings: dict[str, tuple[int, float]] = {}

    def get(
        self,
        name: str,
        *,
        failure_threshold: int | None = None,
        reset_timeout: float | None = None,
    ) -> CircuitBreaker:
        """Get a breaker for `name`, creating its state on first use."""
        state = self._states.get(name)
        if state is None:
            state = BreakerState(name=name)
            self._states[name] = state
            logger.debug(f"Created circuit breaker state for {name}")

        threshold = failure_threshold if failure_threshold is not None else self.failure_threshold
        timeout = reset_timeout if reset_timeout is not None else self.reset_timeout
        self._settings[name] = (threshold, timeout)

        return CircuitBreaker(
            state,
            failure_threshold=threshold,
            reset_timeout=timeout,
            clock=self._clock,
        )

    def state_of(self, name: str) -> BreakerState | None:
        return self._states.get(name)

    def names(self) -> list[str]:
        return list(self._states)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Breaker views keyed by name, using each breaker's last settings."""
        views = {}
        for name in self._states:
            threshold, timeout = self._settings[name]
            views[name] = self.get(
                name, failure_threshold=threshold, reset_timeout=timeout
            ).snapshot()
        return views

    def reset(self, name: str | None = None) -> None:
        """Reset one breaker, or all of them."""
        names = [name] if name is not None else list(self._states)
        for n in names:
            if n in self._states:
                threshold, timeout = self._settings[n]
                self.get(n, failure_threshold=threshold, reset_timeout=timeout).reset()

    def __contains__(self, name: object) -> bool:
        return name in self._states

    def __len__(self) -> int:
        return len(self._states)
