"""Tests for energy_pipeline/sources/news.py.

HTTP is served by httpx.MockTransport, so no request leaves the process.
"""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from energy_pipeline.core.errors import (
    NetworkError,
    PipelineError,
    RateLimitError,
    RequestTimeoutError,
)
from energy_pipeline.core.types import NewsItem
from energy_pipeline.sources.news import (
    TavilyNewsSource,
    parse_published,
    parse_results,
    rank_news,
    recency_score,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def _item(url: str, score: float, hours_old: float) -> NewsItem:
    return NewsItem(
        title=url,
        url=url,
        content="",
        published_date=(NOW - timedelta(hours=hours_old)).isoformat(),
        score=score,
    )


def _tavily_result(url: str, score: float = 0.8) -> dict:
    return {
        "title": f"Title {url}",
        "url": url,
        "content": "Oil prices moved.",
        "published_date": "2025-01-15T06:00:00Z",
        "score": score,
    }


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestParsing:
    """Date parsing and payload parsing."""

    def test_parse_iso_date(self):
        parsed = parse_published("2025-01-15T08:00:00Z")
        assert parsed == datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)

    def test_parse_rfc2822_date(self):
        parsed = parse_published("Wed, 15 Jan 2025 08:00:00 GMT")
        assert parsed == datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)

    def test_parse_garbage_date(self):
        assert parse_published("yesterday-ish") is None
        assert parse_published(None) is None

    def test_parse_results_skips_missing_url(self):
        items = parse_results(
            {"results": [_tavily_result("https://a.com/1"), {"title": "no url"}]}
        )
        assert [i.url for i in items] == ["https://a.com/1"]
        assert items[0].score == 0.8

    def test_parse_results_defaults_score(self):
        items = parse_results({"results": [{"url": "https://a.com/1"}]})
        assert items[0].score == 0.5

    def test_parse_results_keeps_zero_score(self):
        items = parse_results({"results": [{"url": "https://a.com/1", "score": 0.0}]})
        assert items[0].score == 0.0

    def test_parse_results_empty_payload(self):
        assert parse_results({}) == []


class TestRanking:
    """Deduplication and weighted ranking."""

    def test_recency_score_bounds(self):
        assert recency_score(NOW, NOW) == 1.0
        assert recency_score(NOW - timedelta(hours=36), NOW) == pytest.approx(0.5)
        assert recency_score(NOW - timedelta(hours=100), NOW) == 0.0
        assert recency_score(None, NOW) == 0.0

    def test_dedupe_keeps_first_occurrence(self):
        first = _item("https://a.com/1", 0.9, 1)
        duplicate = NewsItem("other", "https://a.com/1", "", NOW.isoformat(), 0.1)

        ranked = rank_news([first, duplicate], now=NOW)

        assert ranked == [first]

    def test_orders_by_score_and_recency(self):
        old_relevant = _item("https://a.com/old", 0.9, 80)  # 0.63
        fresh_weaker = _item("https://a.com/fresh", 0.7, 0)  # 0.79

        ranked = rank_news([old_relevant, fresh_weaker], now=NOW)

        assert [i.url for i in ranked] == ["https://a.com/fresh", "https://a.com/old"]

    def test_keeps_top_n(self):
        items = [_item(f"https://a.com/{i}", i / 20, 1) for i in range(20)]
        ranked = rank_news(items, top_n=5, now=NOW)
        assert len(ranked) == 5
        assert ranked[0].url == "https://a.com/19"


class TestFetch:
    """Concurrent queries with per-query retry."""

    @pytest.mark.asyncio
    async def test_merges_queries(self, sleep):
        def handler(request: httpx.Request) -> httpx.Response:
            query = json.loads(request.content)["query"]
            slug = query.split()[0].lower()
            return httpx.Response(
                200,
                json={
                    "results": [
                        _tavily_result(f"https://news.com/{slug}"),
                        _tavily_result("https://news.com/shared"),
                    ]
                },
            )

        async with _client(handler) as client:
            source = TavilyNewsSource(
                api_key="tvly-test", queries=["OPEC cuts", "Fed rates"], client=client, sleep=sleep
            )
            news = await source.fetch()

        assert sorted(i.url for i in news) == [
            "https://news.com/fed",
            "https://news.com/opec",
            "https://news.com/shared",
        ]

    @pytest.mark.asyncio
    async def test_sends_api_key_and_query(self, sleep):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"results": []})

        async with _client(handler) as client:
            source = TavilyNewsSource(api_key="tvly-test", queries=["OPEC"], client=client, sleep=sleep)
            assert await source.fetch() == []

        assert seen[0]["api_key"] == "tvly-test"
        assert seen[0]["query"] == "OPEC energy market news today"
        assert "reddit.com" in seen[0]["exclude_domains"]

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, sleep):
        calls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            if calls["count"] < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"results": [_tavily_result("https://a.com/1")]})

        async with _client(handler) as client:
            source = TavilyNewsSource(
                api_key="k", queries=["OPEC"], base_delay=2.0, client=client, sleep=sleep
            )
            news = await source.fetch()

        assert len(news) == 1
        assert calls["count"] == 3
        assert sleep.delays == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_one_failing_query_loses_only_its_results(self, sleep):
        def handler(request: httpx.Request) -> httpx.Response:
            if "broken" in json.loads(request.content)["query"]:
                return httpx.Response(500)
            return httpx.Response(200, json={"results": [_tavily_result("https://a.com/ok")]})

        async with _client(handler) as client:
            source = TavilyNewsSource(
                api_key="k", queries=["broken", "fine"], client=client, sleep=sleep
            )
            news = await source.fetch()

        assert [i.url for i in news] == ["https://a.com/ok"]

    @pytest.mark.asyncio
    async def test_all_queries_failing_raises(self, sleep):
        async with _client(lambda request: httpx.Response(502)) as client:
            source = TavilyNewsSource(api_key="k", queries=["a", "b"], client=client, sleep=sleep)
            with pytest.raises(NetworkError, match="All 2 news queries failed"):
                await source.fetch()

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        source = TavilyNewsSource(api_key=None)
        with pytest.raises(PipelineError) as exc_info:
            await source.fetch()
        assert not exc_info.value.is_retryable


class TestSearchErrors:
    """Mapping of HTTP failures onto typed errors."""

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        async with _client(
            lambda request: httpx.Response(429, headers={"retry-after": "30"})
        ) as client:
            with pytest.raises(RateLimitError) as exc_info:
                await TavilyNewsSource(api_key="k").search(client, "OPEC")
        assert exc_info.value.retry_after == 30.0

    @pytest.mark.asyncio
    async def test_client_error_not_retryable(self):
        async with _client(lambda request: httpx.Response(401)) as client:
            with pytest.raises(PipelineError) as exc_info:
                await TavilyNewsSource(api_key="k").search(client, "OPEC")
        assert not exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            with pytest.raises(RequestTimeoutError):
                await TavilyNewsSource(api_key="k").search(client, "OPEC")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(NetworkError):
                await TavilyNewsSource(api_key="k").search(client, "OPEC")
