"""Tagged outcome of a guarded call.

The orchestrator branches on the kind of outcome instead of catching
exceptions for the expected failure modes:

    outcome = await guarded(registry.get("ai"), analyzer.analyze, news, quotes,
                            retry=RetryExecutor(max_attempts=3))
    if isinstance(outcome, Ok):
        analysis = outcome.value
    elif isinstance(outcome, CircuitOpen):
        ...  # outcome.retry_after
    else:
        ...  # Exhausted: outcome.last_error, outcome.attempts
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from ..core.errors import CircuitOpenError, RetryExhaustedError
from .circuit_breaker import CircuitBreaker
from .retry import RetryExecutor

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """The guarded call produced a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class CircuitOpen:
    """The breaker refused the call; nothing was invoked."""

    breaker: str
    retry_after: float

    @property
    def is_ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"circuit {self.breaker} open, retry in {self.retry_after:.0f}s"


@dataclass(frozen=True)
class Exhausted:
    """The call was attempted and every attempt failed."""

    last_error: BaseException
    attempts: int = 1

    @property
    def is_ok(self) -> bool:
        return False

    def describe(self) -> str:
        return (
            f"failed after {self.attempts} attempt(s): "
            f"{type(self.last_error).__name__}: {self.last_error}"
        )


Outcome = Union[Ok[T], CircuitOpen, Exhausted]


async def guarded(
    breaker: CircuitBreaker,
    func: Callable[..., Any],
    *args: Any,
    retry: RetryExecutor | None = None,
    **kwargs: Any,
) -> Outcome[Any]:
    """Run `func` behind `breaker`, optionally retried inside it.

    The breaker sees one failure per exhausted retry sequence.
    """
    try:
        if retry is not None:
            value = await breaker.execute(retry.execute, func, *args, **kwargs)
        else:
            value = await breaker.execute(func, *args, **kwargs)
    except CircuitOpenError as e:
        return CircuitOpen(breaker=e.breaker or breaker.name, retry_after=e.retry_after)
    except RetryExhaustedError as e:
        return Exhausted(last_error=e.last_error, attempts=e.attempts)
    except Exception as e:
        return Exhausted(last_error=e, attempts=1)
    return Ok(value)
