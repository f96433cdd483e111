"""Tests for energy_pipeline/observability."""

import json
import logging

import pytest

from energy_pipeline.observability.logger import (
    PrettyFormatter,
    StructuredFormatter,
    current_context,
    log_context,
)
from energy_pipeline.observability.metrics import RunMetrics
from energy_pipeline.resilience import RateLimiter


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("energy_pipeline.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    """Context fields stamped onto log records."""

    def test_nested_context(self):
        with log_context(run_id="r1", trigger="cli"):
            with log_context(stage="news"):
                ctx = current_context()
                assert ctx.run_id == "r1"
                assert ctx.stage == "news"
            assert current_context().stage is None
        assert current_context().run_id is None

    def test_structured_formatter(self):
        with log_context(run_id="r1", dependency="news"):
            line = StructuredFormatter().format(_record("News fetched", kept=12))

        data = json.loads(line)
        assert data["message"] == "News fetched"
        assert data["run_id"] == "r1"
        assert data["dependency"] == "news"
        assert data["kept"] == 12
        assert data["level"] == "info"

    def test_pretty_formatter(self):
        with log_context(run_id="r1"):
            line = PrettyFormatter().format(_record("hello"))
        assert "hello" in line


class TestRunMetrics:
    def test_stage_timing(self):
        metrics = RunMetrics.start(run_id="abc")
        with metrics.stage("news"):
            pass
        total = metrics.complete()

        assert metrics.run_id == "abc"
        assert "news" in metrics.stage_durations
        assert total >= 0
        assert metrics.is_complete
        assert metrics.complete() == total

    def test_new_run_ids_differ(self):
        assert RunMetrics.start().run_id != RunMetrics.start().run_id


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_burst_is_free(self):
        limiter = RateLimiter(rate=10.0, burst=3)
        waits = [await limiter.acquire() for _ in range(3)]
        assert waits == [0.0, 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_waits_when_empty(self):
        limiter = RateLimiter(rate=100.0, burst=1)
        await limiter.acquire()
        assert await limiter.acquire() > 0

    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            RateLimiter(rate=0)
