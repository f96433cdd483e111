"""Shared types for the energy pipeline.

These records flow between the pipeline stages, the storage layer
and the delivery layer.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class Direction(str, Enum):
    """Predicted price direction."""

    UP = "UP"
    DOWN = "DOWN"
    SIDEWAYS = "SIDEWAYS"


class PredictionCategory(str, Enum):
    """Market segments every analysis must cover."""

    CRUDE_OIL = "crude_oil"
    NATURAL_GAS = "natural_gas"
    ENERGY_STOCKS = "energy_stocks"
    UTILITIES = "utilities"


class DependencyStatus(str, Enum):
    """Observed status of a guarded dependency."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    FAILED = "failed"


class DependencyCategory(str, Enum):
    """Dependencies tracked by the health monitor."""

    NEWS = "news"
    MARKET = "market"
    AI = "ai"


class AnalysisQuality(str, Enum):
    """How complete the analysis of a run is."""

    FULL = "full"
    PARTIAL = "partial"
    FALLBACK = "fallback"


@dataclass
class NewsItem:
    """A single news article returned by the news search."""

    title: str
    url: str
    content: str
    published_date: str
    score: float = 0.5

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MarketQuote:
    """Latest quote for one tracked symbol."""

    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change": self.change,
            "change_percent": self.change_percent,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Prediction:
    """Directional call for one market segment."""

    direction: Direction
    confidence: int
    reasoning: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "direction": self.direction.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


@dataclass
class SummaryPoint:
    """One bullet of the market summary with its supporting source."""

    text: str
    source_url: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Analysis:
    """Market analysis produced by the analysis stage (or the fallback).

    `quality` is set by whoever builds the analysis so downstream code
    never has to guess it from the text.
    """

    summary: list[SummaryPoint]
    predictions: dict[PredictionCategory, Prediction]
    reasoning: str
    quality: AnalysisQuality = AnalysisQuality.FULL
    accuracy_score: float | None = None

    @property
    def predictions_generated(self) -> int:
        return len(self.predictions)

    def predictions_dict(self) -> dict[str, Any]:
        return {category.value: p.to_dict() for category, p in self.predictions.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": [point.to_dict() for point in self.summary],
            "predictions": self.predictions_dict(),
            "reasoning": self.reasoning,
            "quality": self.quality.value,
            "accuracy_score": self.accuracy_score,
        }


@dataclass
class StoredAnalysis:
    """An analysis together with the identity it is reported under."""

    id: str
    created_at: datetime
    analysis: Analysis

    @property
    def is_temporary(self) -> bool:
        return self.id.startswith("temp-")

    @classmethod
    def temporary(cls, analysis: Analysis) -> StoredAnalysis:
        """Placeholder identity for an analysis that could not be persisted."""
        return cls(
            id=f"temp-{int(time.time() * 1000)}",
            created_at=utc_now(),
            analysis=analysis,
        )


@dataclass
class Subscriber:
    """A user registered to receive the daily briefing."""

    id: str
    chat_id: str
    username: str | None = None


@dataclass
class StoreOutcome:
    """Result of persisting one artifact."""

    name: str
    ok: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"ok": self.ok}
        if self.error:
            d["error"] = self.error
        return d


@dataclass
class PersistenceReport:
    """Per-store results of the persistence fan-out."""

    analysis: StoreOutcome
    news: StoreOutcome
    market: StoreOutcome
    stored_analysis: StoredAnalysis | None = None

    @property
    def all_ok(self) -> bool:
        return self.analysis.ok and self.news.ok and self.market.ok

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysis": self.analysis.to_dict(),
            "news": self.news.to_dict(),
            "market": self.market.to_dict(),
        }


@dataclass
class DeliveryReport:
    """Subscribers attempted vs. messages actually delivered."""

    subscriber_count: int = 0
    delivered: int = 0
    failed_chat_ids: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.subscriber_count - self.delivered

    def to_dict(self) -> dict[str, Any]:
        return {
            "subscribers": self.subscriber_count,
            "delivered": self.delivered,
            "failed": self.failed,
        }


@dataclass
class PipelineResult:
    """Everything a single run produced."""

    run_id: str
    news: list[NewsItem]
    quotes: list[MarketQuote]
    analysis: Analysis
    persistence: PersistenceReport
    final_analysis: StoredAnalysis
    delivery: DeliveryReport
    execution_time_ms: int = 0


@dataclass
class RunResponse:
    """Top-level answer of one orchestrator run."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {
            "success": False,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }
