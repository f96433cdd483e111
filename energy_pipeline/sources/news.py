"""Tavily news search source.

Runs one search per configured query concurrently, retries each query
with backoff, then deduplicates by URL and ranks by relevance and
recency.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx
import pandas as pd

from ..config.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    NEWS_BASE_DELAY,
    NEWS_EXCLUDE_DOMAINS,
    NEWS_INCLUDE_DOMAINS,
    NEWS_MAX_ATTEMPTS,
    NEWS_MAX_RESULTS_PER_QUERY,
    NEWS_QUERIES,
    NEWS_RECENCY_WEIGHT,
    NEWS_SCORE_WEIGHT,
    NEWS_TOP_N,
    TAVILY_API_URL,
)
from ..core.errors import NetworkError, PipelineError
from ..core.types import NewsItem, utc_now
from ..observability.logger import get_logger
from ..resilience.retry import RetryExecutor, Sleep
from .http import check_response, translate_transport_error

logger = get_logger(__name__)

SOURCE = "tavily"

# Articles older than this get no recency credit
RECENCY_WINDOW_HOURS = 72.0


def parse_published(value: str | None) -> datetime | None:
    """Parse a Tavily date (ISO or RFC 2822) into an aware UTC datetime."""
    if not value:
        return None
    parsed = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def recency_score(published: datetime | None, now: datetime) -> float:
    """1.0 for a brand new article, falling linearly to 0 at the window edge."""
    if published is None:
        return 0.0
    age_hours = max(0.0, (now - published).total_seconds() / 3600)
    return max(0.0, 1.0 - age_hours / RECENCY_WINDOW_HOURS)


def rank_news(
    items: list[NewsItem],
    *,
    top_n: int = NEWS_TOP_N,
    now: datetime | None = None,
) -> list[NewsItem]:
    """Deduplicate by URL (first wins) and keep the best `top_n` articles."""
    now = now or utc_now()

    unique: dict[str, NewsItem] = {}
    for item in items:
        unique.setdefault(item.url, item)

    def weight(item: NewsItem) -> float:
        recency = recency_score(parse_published(item.published_date), now)
        return item.score * NEWS_SCORE_WEIGHT + recency * NEWS_RECENCY_WEIGHT

    return sorted(unique.values(), key=weight, reverse=True)[:top_n]


def parse_results(payload: dict[str, Any]) -> list[NewsItem]:
    items = []
    for result in payload.get("results") or []:
        url = result.get("url")
        if not url:
            continue
        score = result.get("score")
        items.append(
            NewsItem(
                title=result.get("title") or "",
                url=url,
                content=result.get("content") or "",
                published_date=result.get("published_date") or utc_now().isoformat(),
                score=0.5 if score is None else float(score),
            )
        )
    return items


@dataclass
class TavilyNewsSource:
    """Market-moving energy news from the Tavily search API.

    Usage:
        source = TavilyNewsSource(api_key=settings.tavily_api_key)
        news = await source.fetch()
    """

    api_key: str | None
    queries: list[str] = field(default_factory=lambda: list(NEWS_QUERIES))
    max_results: int = NEWS_MAX_RESULTS_PER_QUERY
    top_n: int = NEWS_TOP_N
    max_attempts: int = NEWS_MAX_ATTEMPTS
    base_delay: float = NEWS_BASE_DELAY
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    client: httpx.AsyncClient | None = field(default=None, repr=False)
    sleep: Sleep = field(default=asyncio.sleep, repr=False)

    def _payload(self, query: str) -> dict[str, Any]:
        return {
            "api_key": self.api_key,
            "query": f"{query} energy market news today",
            "search_depth": "advanced",
            "include_answer": True,
            "max_results": self.max_results,
            "include_domains": NEWS_INCLUDE_DOMAINS,
            "exclude_domains": NEWS_EXCLUDE_DOMAINS,
        }

    async def search(self, client: httpx.AsyncClient, query: str) -> list[NewsItem]:
        """Run a single search. Raises typed errors on failure."""
        try:
            response = await client.post(TAVILY_API_URL, json=self._payload(query))
        except httpx.HTTPError as e:
            raise translate_transport_error(e, SOURCE) from e

        check_response(response, SOURCE)
        return parse_results(response.json())

    async def _search_with_retry(self, client: httpx.AsyncClient, query: str) -> list[NewsItem]:
        executor = RetryExecutor(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            description=f"Tavily search '{query}'",
            sleep=self.sleep,
        )
        return await executor.execute(self.search, client, query)

    async def fetch(self) -> list[NewsItem]:
        """Fetch, merge and rank the results of every query.

        A failing query only loses its own results. If every query fails
        the whole fetch fails.
        """
        if not self.api_key:
            raise PipelineError("TAVILY_API_KEY is not configured", source=SOURCE)

        if self.client is not None:
            return await self._fetch_all(self.client)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._fetch_all(client)

    async def _fetch_all(self, client: httpx.AsyncClient) -> list[NewsItem]:
        results = await asyncio.gather(
            *(self._search_with_retry(client, query) for query in self.queries),
            return_exceptions=True,
        )

        collected: list[NewsItem] = []
        failures = 0
        for query, result in zip(self.queries, results):
            if isinstance(result, BaseException):
                failures += 1
                logger.error(f"News query failed: {query}", extra={"error": str(result)})
                continue
            collected.extend(result)

        if failures == len(self.queries):
            raise NetworkError(f"All {failures} news queries failed", source=SOURCE)

        ranked = rank_news(collected, top_n=self.top_n)
        logger.info(
            "News fetched",
            extra={"raw_count": len(collected), "kept": len(ranked), "failed_queries": failures},
        )
        return ranked
