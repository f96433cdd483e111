"""In-process storage backend.

Used when no Supabase credentials are configured (local runs, dry runs
from the CLI). Nothing survives the process.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from ..core.types import (
    Analysis,
    MarketQuote,
    NewsItem,
    StoredAnalysis,
    Subscriber,
    utc_now,
)
from .base import NotificationStatus, market_row, news_row


@dataclass
class MemoryStorage:
    subscribers: list[Subscriber] = field(default_factory=list)
    analyses: list[StoredAnalysis] = field(default_factory=list)
    news: dict[str, dict[str, Any]] = field(default_factory=dict)
    market: list[dict[str, Any]] = field(default_factory=list)
    notifications: list[dict[str, Any]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return "memory"

    async def store_analysis(self, analysis: Analysis) -> StoredAnalysis:
        stored = StoredAnalysis(id=str(uuid.uuid4()), created_at=utc_now(), analysis=analysis)
        self.analyses.append(stored)
        return stored

    async def store_news(self, items: list[NewsItem]) -> int:
        for item in items:
            self.news[item.url] = news_row(item)
        return len(items)

    async def store_market(self, quotes: list[MarketQuote]) -> int:
        self.market.extend(market_row(q) for q in quotes)
        return len(quotes)

    async def get_active_subscribers(self) -> list[Subscriber]:
        return list(self.subscribers)

    async def track_notification(
        self,
        subscriber_id: str,
        analysis_id: str,
        status: NotificationStatus,
        error_message: str | None = None,
    ) -> None:
        self.notifications.append(
            {
                "user_id": subscriber_id,
                "analysis_id": analysis_id,
                "delivery_status": status,
                "error_message": error_message,
            }
        )
