"""Timing metrics for a pipeline run.

Usage:
    metrics = RunMetrics.start()

    with metrics.stage("news"):
        news = await fetch_news()

    metrics.complete()
    print(metrics.execution_time_ms)
    print(metrics.to_summary())
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def new_run_id() -> str:
    """Short identifier used to correlate the log lines of one run."""
    return uuid.uuid4().hex[:12]


@dataclass
class RunMetrics:
    """Wall-clock timing of one orchestrator run and its stages."""

    run_id: str
    started_at: datetime
    _start: float = field(default=0.0, repr=False)
    _end: float | None = field(default=None, repr=False)

    # Stage timing (milliseconds)
    stage_durations: dict[str, int] = field(default_factory=dict)

    @classmethod
    def start(cls, run_id: str | None = None) -> RunMetrics:
        return cls(
            run_id=run_id or new_run_id(),
            started_at=datetime.now(timezone.utc),
            _start=time.monotonic(),
        )

    @property
    def execution_time_ms(self) -> int:
        """Elapsed milliseconds; keeps counting until complete() is called."""
        end = self._end if self._end is not None else time.monotonic()
        return int((end - self._start) * 1000)

    @property
    def is_complete(self) -> bool:
        return self._end is not None

    def stage(self, name: str) -> StageTimer:
        return StageTimer(self, name)

    def record_stage(self, name: str, duration_ms: int) -> None:
        self.stage_durations[name] = duration_ms

    def complete(self) -> int:
        """Stop the clock and return the total execution time."""
        if self._end is None:
            self._end = time.monotonic()
        return self.execution_time_ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "execution_time_ms": self.execution_time_ms,
            "stage_durations_ms": dict(self.stage_durations),
        }

    def to_summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            f"Run {self.run_id}",
            "=" * 40,
            f"Duration: {self.execution_time_ms}ms",
        ]
        if self.stage_durations:
            lines.append("")
            lines.append("Stage Durations:")
            for stage, duration in self.stage_durations.items():
                lines.append(f"  {stage}: {duration}ms")
        return "\n".join(lines)


class StageTimer:
    """Context manager for timing a stage."""

    def __init__(self, metrics: RunMetrics, name: str) -> None:
        self.metrics = metrics
        self.name = name
        self.start_time: float = 0

    def __enter__(self) -> StageTimer:
        self.start_time = time.monotonic()
        return self

    def __exit__(self, *args: Any) -> None:
        duration = int((time.monotonic() - self.start_time) * 1000)
        self.metrics.record_stage(self.name, duration)
