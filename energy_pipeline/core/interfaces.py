"""Protocols for the collaborators the orchestrator drives.

Every collaborator is an opaque async operation that either returns
a typed result or raises.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import (
    Analysis,
    DeliveryReport,
    MarketQuote,
    NewsItem,
    StoredAnalysis,
)


@runtime_checkable
class NewsSource(Protocol):
    """Fetches today's market-moving news."""

    async def fetch(self) -> list[NewsItem]: ...


@runtime_checkable
class MarketSource(Protocol):
    """Fetches the latest quotes for the tracked symbols."""

    async def fetch(self) -> list[MarketQuote]: ...


@runtime_checkable
class Analyzer(Protocol):
    """Turns news and quotes into an analysis."""

    async def analyze(
        self,
        news: list[NewsItem],
        quotes: list[MarketQuote],
    ) -> Analysis: ...


@runtime_checkable
class AnalysisStore(Protocol):
    """Persists the three artifacts of a run."""

    async def store_analysis(self, analysis: Analysis) -> StoredAnalysis: ...

    async def store_news(self, items: list[NewsItem]) -> int: ...

    async def store_market(self, quotes: list[MarketQuote]) -> int: ...


@runtime_checkable
class Delivery(Protocol):
    """Sends an analysis to every active subscriber."""

    async def deliver(self, stored: StoredAnalysis) -> DeliveryReport: ...


@runtime_checkable
class Notifier(Protocol):
    """Operator notification channel used for alerts and digests."""

    async def send(self, message: str) -> None: ...
