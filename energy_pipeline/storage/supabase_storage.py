"""Supabase storage backend."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from supabase import Client, create_client

from ..core.errors import StorageError
from ..core.types import (
    Analysis,
    MarketQuote,
    NewsItem,
    StoredAnalysis,
    Subscriber,
    utc_now,
)
from ..observability.logger import get_logger
from .base import (
    NotificationStatus,
    analysis_row,
    market_row,
    news_row,
    parse_created_at,
)

logger = get_logger(__name__)

ANALYSIS_TABLE = "analysis_results"
NEWS_TABLE = "news_articles"
MARKET_TABLE = "market_data"
USERS_TABLE = "users"
NOTIFICATIONS_TABLE = "user_notifications"


@dataclass
class SupabaseStorage:
    """Supabase storage backend.

    The supabase client is synchronous; every call runs in a worker
    thread so the event loop stays responsive. Failures raise
    StorageError naming the table.
    """

    supabase_url: str
    supabase_key: str
    _client: Client | None = field(default=None, init=False, repr=False)

    @property
    def name(self) -> str:
        return "supabase"

    @property
    def client(self) -> Client:
        """Lazy initialization of Supabase client."""
        if self._client is None:
            self._client = create_client(self.supabase_url, self.supabase_key)
        return self._client

    async def _run(self, table: str, action: str, func: Any) -> Any:
        try:
            return await asyncio.to_thread(func)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Failed to {action} in {table}: {e}")
            raise StorageError(f"Failed to {action}: {e}", table=table) from e

    # === Pipeline artifacts ===

    def _insert_analysis(self, analysis: Analysis) -> StoredAnalysis:
        result = self.client.table(ANALYSIS_TABLE).insert(analysis_row(analysis)).execute()
        if not result.data:
            raise StorageError("Insert returned no row", table=ANALYSIS_TABLE)

        row = result.data[0]
        return StoredAnalysis(
            id=str(row["id"]),
            created_at=parse_created_at(row.get("created_at")),
            analysis=analysis,
        )

    async def store_analysis(self, analysis: Analysis) -> StoredAnalysis:
        stored = await self._run(
            ANALYSIS_TABLE, "store analysis", lambda: self._insert_analysis(analysis)
        )
        logger.info("Analysis stored", extra={"analysis_id": stored.id})
        return stored

    async def store_news(self, items: list[NewsItem]) -> int:
        """Upsert articles on url so re-runs do not duplicate them."""
        if not items:
            return 0

        rows = [news_row(item) for item in items]
        result = await self._run(
            NEWS_TABLE,
            "store news",
            lambda: self.client.table(NEWS_TABLE).upsert(rows, on_conflict="url").execute(),
        )
        saved = len(result.data) if result.data else 0
        logger.info(f"Upserted {saved} news articles")
        return saved

    async def store_market(self, quotes: list[MarketQuote]) -> int:
        if not quotes:
            return 0

        rows = [market_row(q) for q in quotes]
        result = await self._run(
            MARKET_TABLE,
            "store market data",
            lambda: self.client.table(MARKET_TABLE).insert(rows).execute(),
        )
        saved = len(result.data) if result.data else 0
        logger.info(f"Inserted {saved} market rows")
        return saved

    # === Subscribers ===

    async def get_active_subscribers(self) -> list[Subscriber]:
        result = await self._run(
            USERS_TABLE,
            "load subscribers",
            lambda: (
                self.client.table(USERS_TABLE)
                .select("id, telegram_chat_id, telegram_username")
                .eq("is_active", True)
                .not_.is_("telegram_chat_id", "null")
                .execute()
            ),
        )
        return [
            Subscriber(
                id=str(row["id"]),
                chat_id=str(row["telegram_chat_id"]),
                username=row.get("telegram_username"),
            )
            for row in result.data or []
            if row.get("telegram_chat_id")
        ]

    async def track_notification(
        self,
        subscriber_id: str,
        analysis_id: str,
        status: NotificationStatus,
        error_message: str | None = None,
    ) -> None:
        row = {
            "user_id": subscriber_id,
            "analysis_id": analysis_id,
            "sent_at": utc_now().isoformat(),
            "delivery_status": status,
            "error_message": error_message,
        }
        await self._run(
            NOTIFICATIONS_TABLE,
            "track notification",
            lambda: self.client.table(NOTIFICATIONS_TABLE).insert(row).execute(),
        )
