"""Resilience components for upstream dependencies.

Provides fault tolerance patterns:
- CircuitBreaker / CircuitBreakerRegistry: fail fast on sustained outages
- RetryExecutor: exponential backoff for transient failures
- RateLimiter: token bucket pacing for outbound sends
- guarded(): composes the above into a tagged Outcome
"""

from .circuit_breaker import (
    BreakerState,
    CircuitBreaker,
    CircuitBreakerRegistry,
    CircuitState,
)
from .outcome import CircuitOpen, Exhausted, Ok, Outcome, guarded
from .rate_limiter import RateLimiter
from .retry import RetryExecutor, retry_with_backoff

__all__ = [
    "BreakerState",
    "CircuitBreaker",
    "CircuitBreakerRegistry",
    "CircuitState",
    "RateLimiter",
    "RetryExecutor",
    "retry_with_backoff",
    "Ok",
    "CircuitOpen",
    "Exhausted",
    "Outcome",
    "guarded",
]
