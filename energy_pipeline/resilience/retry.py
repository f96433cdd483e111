"""Exponential Backoff Retry Executor.

Attempt n (1-indexed) that fails is followed by a wait of
base_delay * multiplier^(n-1) before attempt n+1:
base_delay, 2*base_delay, 4*base_delay, ...

- Configurable max attempts
- Optional cap and jitter
- Errors that declare themselves non-retryable are raised at once
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from ..config.constants import DEFAULT_MAX_DELAY
from ..core.errors import PipelineError, RetryExhaustedError
from ..observability.logger import get_logger

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RetryExecutor:
    """Retry executor with exponential backoff.

    Usage:
        executor = RetryExecutor(max_attempts=3, base_delay=1.0)

        result = await executor.execute(risky_operation, arg1, arg2)
    """

    # Configuration
    max_attempts: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = DEFAULT_MAX_DELAY  # seconds
    multiplier: float = 2.0
    jitter: float = 0.0  # 0.0 to 1.0
    description: str = "Operation"
    sleep: Sleep = field(default=asyncio.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    async def execute(
        self,
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Execute function with retries.

        Args:
            func: Async or sync function to execute
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Function result

        Raises:
            RetryExhaustedError: after max_attempts failures, chained to the last error
            Non-retryable PipelineError: immediately, without further attempts
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = func(*args, **kwargs)
                if asyncio.iscoroutine(result):
                    result = await result
            except Exception as e:
                last_error = e

                if not self._is_retryable(e):
                    logger.debug(
                        f"{self.description}: non-retryable {type(e).__name__}",
                        extra={"attempt": attempt},
                    )
                    raise

                logger.info(
                    f"{self.description} failed on attempt {attempt}/{self.max_attempts}",
                    extra={"error": f"{type(e).__name__}: {e}"},
                )

                if attempt >= self.max_attempts:
                    break

                delay = self.calculate_delay(attempt)
                logger.info(f"Retrying {self.description} in {delay:.2f}s")
                await self.sleep(delay)
                continue

            if attempt > 1:
                logger.info(f"{self.description} succeeded on attempt {attempt}")
            return result

        assert last_error is not None
        logger.warning(
            f"{self.description} failed after {self.max_attempts} attempts",
            extra={"error": str(last_error)},
        )
        raise RetryExhaustedError(
            f"{self.description} failed after {self.max_attempts} attempts: {last_error}",
            attempts=self.max_attempts,
            last_error=last_error,
            source=getattr(last_error, "source", None),
        ) from last_error

    def _is_retryable(self, error: Exception) -> bool:
        """PipelineErrors decide for themselves; anything else is retried."""
        if isinstance(error, PipelineError):
            return error.is_retryable
        return True

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the wait after a failed attempt.

        Args:
            attempt: The attempt that just failed (1-based)

        Returns:
            Delay in seconds
        """
        delay = self.base_delay * (self.multiplier ** (attempt - 1))
        delay = min(delay, self.max_delay)

        if self.jitter:
            jitter_range = delay * self.jitter
            delay += random.uniform(-jitter_range, jitter_range)

        return max(0.0, delay)


async def retry_with_backoff(
    func: Callable[[], Any],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    description: str = "Operation",
    sleep: Sleep = asyncio.sleep,
) -> Any:
    """Functional shortcut for a one-off RetryExecutor."""
    executor = RetryExecutor(
        max_attempts=max_attempts,
        base_delay=base_delay,
        description=description,
        sleep=sleep,
    )
    return await executor.execute(func)
