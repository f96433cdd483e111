"""Tests for energy_pipeline/resilience/outcome.py."""

import pytest

from energy_pipeline.core.errors import NetworkError, PipelineError
from energy_pipeline.resilience import (
    CircuitOpen,
    CircuitState,
    Exhausted,
    Ok,
    RetryExecutor,
    guarded,
)


async def _fail():
    raise NetworkError("down")


class TestGuarded:
    """Outcome kinds produced by guarded()."""

    @pytest.mark.asyncio
    async def test_ok(self, registry):
        async def fetch():
            return [1, 2, 3]

        outcome = await guarded(registry.get("news"), fetch)

        assert isinstance(outcome, Ok)
        assert outcome.is_ok
        assert outcome.value == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_exhausted_without_retry(self, registry):
        outcome = await guarded(registry.get("news"), _fail)

        assert isinstance(outcome, Exhausted)
        assert outcome.attempts == 1
        assert isinstance(outcome.last_error, NetworkError)
        assert "NetworkError: down" in outcome.describe()

    @pytest.mark.asyncio
    async def test_circuit_open(self, registry):
        breaker = registry.get("news")
        for _ in range(3):
            await guarded(breaker, _fail)

        outcome = await guarded(breaker, _fail)

        assert isinstance(outcome, CircuitOpen)
        assert not outcome.is_ok
        assert outcome.breaker == "news"
        assert outcome.retry_after == pytest.approx(60)
        assert outcome.describe() == "circuit news open, retry in 60s"

    @pytest.mark.asyncio
    async def test_retry_sequence_counts_as_one_breaker_failure(self, registry, sleep):
        breaker = registry.get("ai")
        retry = RetryExecutor(max_attempts=3, base_delay=1.0, sleep=sleep)

        outcome = await guarded(breaker, _fail, retry=retry)

        assert isinstance(outcome, Exhausted)
        assert outcome.attempts == 3
        assert isinstance(outcome.last_error, NetworkError)
        assert breaker.consecutive_failures == 1
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_non_retryable_inside_retry(self, registry, sleep):
        async def reject():
            raise PipelineError("bad request")

        retry = RetryExecutor(max_attempts=3, sleep=sleep)
        outcome = await guarded(registry.get("ai"), reject, retry=retry)

        assert isinstance(outcome, Exhausted)
        assert outcome.attempts == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_arguments_are_forwarded(self, registry, sleep):
        async def analyze(news, quotes, *, model):
            return f"{len(news)}/{len(quotes)}/{model}"

        outcome = await guarded(
            registry.get("ai"),
            analyze,
            [1],
            [1, 2],
            retry=RetryExecutor(sleep=sleep),
            model="m",
        )
        assert outcome == Ok("1/2/m")
