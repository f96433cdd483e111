"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from energy_pipeline.core.types import (
    Analysis,
    AnalysisQuality,
    Direction,
    MarketQuote,
    NewsItem,
    Prediction,
    PredictionCategory,
    StoredAnalysis,
    SummaryPoint,
)
from energy_pipeline.monitoring import HealthMonitor
from energy_pipeline.resilience import CircuitBreakerRegistry

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RecordingNotifier:
    """Notifier that keeps the messages instead of sending them."""

    def __init__(self, fail: bool = False) -> None:
        self.messages: list[str] = []
        self.fail = fail

    async def send(self, message: str) -> None:
        if self.fail:
            raise ConnectionError("admin chat unreachable")
        self.messages.append(message)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def registry(clock) -> CircuitBreakerRegistry:
    return CircuitBreakerRegistry(failure_threshold=3, reset_timeout=60, clock=clock)


@pytest.fixture
def monitor(notifier) -> HealthMonitor:
    return HealthMonitor(notifier)


@pytest.fixture
def sample_news() -> list[NewsItem]:
    """Three articles with distinct URLs."""
    return [
        NewsItem(
            title="OPEC+ extends production cuts",
            url="https://reuters.com/opec-cuts",
            content="OPEC+ agreed to extend output cuts through the second quarter.",
            published_date="2025-01-15T08:00:00Z",
            score=0.92,
        ),
        NewsItem(
            title="US crude inventories fall",
            url="https://cnbc.com/eia-inventories",
            content="EIA data showed a larger than expected draw.",
            published_date="2025-01-14T16:30:00Z",
            score=0.81,
        ),
        NewsItem(
            title="Utilities rally on rate cut hopes",
            url="https://wsj.com/utilities-rally",
            content="Utility stocks rose as bond yields eased.",
            published_date="2025-01-13T10:00:00Z",
            score=0.64,
        ),
    ]


@pytest.fixture
def sample_quotes() -> list[MarketQuote]:
    return [
        MarketQuote(symbol="CL=F", price=78.4, change=1.2, change_percent=1.55, timestamp=FIXED_NOW),
        MarketQuote(symbol="NG=F", price=3.12, change=-0.05, change_percent=-1.58, timestamp=FIXED_NOW),
        MarketQuote(symbol="XLE", price=91.3, change=0.4, change_percent=0.44, timestamp=FIXED_NOW),
    ]


@pytest.fixture
def sample_analysis() -> Analysis:
    return Analysis(
        summary=[
            SummaryPoint(text="OPEC+ keeps supply tight", source_url="https://reuters.com/opec-cuts"),
            SummaryPoint(text="Inventories drew again", source_url="https://cnbc.com/eia-inventories"),
        ],
        predictions={
            PredictionCategory.CRUDE_OIL: Prediction(Direction.UP, 72, "Supply discipline"),
            PredictionCategory.NATURAL_GAS: Prediction(Direction.DOWN, 60, "Mild weather"),
            PredictionCategory.ENERGY_STOCKS: Prediction(Direction.UP, 65, "Follows crude"),
            PredictionCategory.UTILITIES: Prediction(Direction.SIDEWAYS, 55, "Rates on hold"),
        },
        reasoning="Crude is supported by OPEC+ discipline and falling inventories. " * 10,
        quality=AnalysisQuality.FULL,
    )


@pytest.fixture
def sample_analysis_json() -> dict:
    """A well-formed model answer."""
    return {
        "summary": [
            {"text": "OPEC+ keeps supply tight", "source_url": "https://reuters.com/opec-cuts"},
        ],
        "predictions": {
            "crude_oil": {"direction": "up", "confidence": 72, "reasoning": "Supply discipline"},
            "natural_gas": {"direction": "DOWN", "confidence": 60.4, "reasoning": "Mild weather"},
            "energy_stocks": {"direction": "UP", "confidence": 65, "reasoning": "Follows crude"},
            "utilities": {"direction": "SIDEWAYS", "confidence": 55, "reasoning": "Rates on hold"},
        },
        "reasoning": "Crude is supported by OPEC+ discipline and falling inventories.",
    }


@pytest.fixture
def stored_analysis(sample_analysis) -> StoredAnalysis:
    return StoredAnalysis(id="a1b2c3", created_at=FIXED_NOW, analysis=sample_analysis)


@pytest.fixture
def news_source(sample_news) -> MagicMock:
    source = MagicMock()
    source.fetch = AsyncMock(return_value=sample_news)
    return source


@pytest.fixture
def market_source(sample_quotes) -> MagicMock:
    source = MagicMock()
    source.fetch = AsyncMock(return_value=sample_quotes)
    return source


@pytest.fixture
def analyzer(sample_analysis) -> MagicMock:
    mock = MagicMock()
    mock.analyze = AsyncMock(return_value=sample_analysis)
    return mock


@pytest.fixture
def store() -> MagicMock:
    """Store whose three writes all succeed."""
    mock = MagicMock()
    mock.store_analysis = AsyncMock(
        side_effect=lambda analysis: StoredAnalysis(
            id="stored-1", created_at=FIXED_NOW, analysis=analysis
        )
    )
    mock.store_news = AsyncMock(side_effect=lambda items: len(items))
    mock.store_market = AsyncMock(side_effect=lambda quotes: len(quotes))
    return mock


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)
