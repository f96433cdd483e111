"""Default news and market sources."""

from .market import YFinanceMarketSource, quote_from_closes, quotes_from_download
from .news import TavilyNewsSource, rank_news

__all__ = [
    "TavilyNewsSource",
    "YFinanceMarketSource",
    "quote_from_closes",
    "quotes_from_download",
    "rank_news",
]
