"""Base protocol and row mapping for storage backends."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Protocol, runtime_checkable

from ..core.types import (
    Analysis,
    MarketQuote,
    NewsItem,
    StoredAnalysis,
    Subscriber,
    utc_now,
)

NotificationStatus = Literal["sent", "failed"]


@runtime_checkable
class SubscriberStore(Protocol):
    """Subscriber lookup and per-message delivery tracking."""

    async def get_active_subscribers(self) -> list[Subscriber]: ...

    async def track_notification(
        self,
        subscriber_id: str,
        analysis_id: str,
        status: NotificationStatus,
        error_message: str | None = None,
    ) -> None: ...


@runtime_checkable
class Storage(SubscriberStore, Protocol):
    """Protocol for storage backends (Supabase, in-memory).

    Combines the orchestrator's AnalysisStore operations with
    subscriber access for the delivery layer.
    """

    @property
    def name(self) -> str:
        """Storage backend name (e.g., 'supabase', 'memory')."""
        ...

    async def store_analysis(self, analysis: Analysis) -> StoredAnalysis: ...

    async def store_news(self, items: list[NewsItem]) -> int: ...

    async def store_market(self, quotes: list[MarketQuote]) -> int: ...


def analysis_row(analysis: Analysis) -> dict[str, Any]:
    return {
        "news_summary": [p.to_dict() for p in analysis.summary],
        "market_predictions": analysis.predictions_dict(),
        "reasoning": analysis.reasoning,
        "accuracy_score": analysis.accuracy_score,
    }


def news_row(item: NewsItem) -> dict[str, Any]:
    return {
        "title": item.title,
        "url": item.url,
        "content": item.content,
        "published_date": item.published_date,
        "score": item.score,
    }


def market_row(quote: MarketQuote) -> dict[str, Any]:
    return {
        "symbol": quote.symbol,
        "price": quote.price,
        "change_amount": quote.change,
        "change_percent": quote.change_percent,
    }


def parse_created_at(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return utc_now()
