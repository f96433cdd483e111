"""Yahoo Finance quotes for the tracked energy symbols.

yfinance is synchronous, so the batch download runs in a worker thread
with a timeout. A symbol without data is skipped; a failed or empty
download fails the whole fetch.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pandas as pd
import yfinance as yf

from ..config.constants import (
    ENERGY_SYMBOLS,
    MARKET_FETCH_TIMEOUT,
    MARKET_HISTORY_PERIOD,
)
from ..core.errors import DataNotFoundError, RequestTimeoutError, classify_exception
from ..core.types import MarketQuote, utc_now
from ..observability.logger import get_logger

logger = get_logger(__name__)

SOURCE = "yfinance"


def _quote_timestamp(index_value: object) -> datetime:
    if isinstance(index_value, pd.Timestamp):
        if index_value.tzinfo is None:
            return index_value.tz_localize(timezone.utc).to_pydatetime()
        return index_value.tz_convert(timezone.utc).to_pydatetime()
    return utc_now()


def quote_from_closes(symbol: str, close: pd.Series) -> MarketQuote | None:
    """Build a quote from a series of daily closes (oldest first)."""
    close = close.dropna()
    if close.empty:
        return None

    price = float(close.iloc[-1])
    change = 0.0
    change_percent = 0.0
    if len(close) > 1:
        prev_close = float(close.iloc[-2])
        change = price - prev_close
        if prev_close > 0:
            change_percent = change / prev_close * 100

    return MarketQuote(
        symbol=symbol,
        price=round(price, 4),
        change=round(change, 4),
        change_percent=round(change_percent, 4),
        timestamp=_quote_timestamp(close.index[-1]),
    )


def quotes_from_download(df: pd.DataFrame, symbols: list[str]) -> list[MarketQuote]:
    """Extract one quote per symbol from a yf.download() frame."""
    if df.empty:
        return []

    quotes = []
    if isinstance(df.columns, pd.MultiIndex):
        available = set(df.columns.get_level_values(1))
        for symbol in symbols:
            if symbol not in available:
                continue
            quote = quote_from_closes(symbol, df["Close"][symbol])
            if quote:
                quotes.append(quote)
    elif len(symbols) == 1 and "Close" in df.columns:
        quote = quote_from_closes(symbols[0], df["Close"])
        if quote:
            quotes.append(quote)
    return quotes


@dataclass
class YFinanceMarketSource:
    """Latest quotes for the energy watch list.

    Usage:
        source = YFinanceMarketSource()
        quotes = await source.fetch()
    """

    symbols: list[str] = field(default_factory=lambda: list(ENERGY_SYMBOLS.values()))
    period: str = MARKET_HISTORY_PERIOD
    timeout: float = MARKET_FETCH_TIMEOUT

    def _download(self) -> pd.DataFrame:
        return yf.download(
            self.symbols,
            period=self.period,
            progress=False,
            threads=False,
            auto_adjust=True,
        )

    async def fetch(self) -> list[MarketQuote]:
        # A download abandoned on timeout keeps its thread; the default pool
        # still has room for the next fetch.
        try:
            df = await asyncio.wait_for(
                asyncio.to_thread(self._download),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"Market download timed out after {self.timeout}s",
                timeout_seconds=self.timeout,
                source=SOURCE,
            ) from e
        except Exception as e:
            raise classify_exception(e, source=SOURCE) from e

        quotes = quotes_from_download(df, self.symbols)
        if not quotes:
            raise DataNotFoundError("No market data returned", source=SOURCE)

        missing = len(self.symbols) - len(quotes)
        if missing:
            logger.warning(f"{missing} symbol(s) without market data")
        logger.info("Market data fetched", extra={"symbols": len(quotes)})
        return quotes
