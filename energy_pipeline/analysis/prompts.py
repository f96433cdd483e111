"""Prompt construction for the market analysis."""

from __future__ import annotations

from ..config.constants import PROMPT_NEWS_CONTENT_CHARS
from ..core.types import MarketQuote, NewsItem
from ..sources.news import parse_published

SYSTEM_PROMPT = (
    "You are an expert energy market analyst with 20+ years of experience. "
    "You answer with a single JSON object and nothing else."
)

RESPONSE_FORMAT = """{
  "summary": [
    {"text": "Key bullet point 1 about today's energy developments", "source_url": "URL from the news data"},
    {"text": "Key bullet point 2 about market-moving events", "source_url": "URL from the news data"},
    {"text": "Key bullet point 3 about geopolitical factors", "source_url": "URL from the news data"},
    {"text": "Key bullet point 4 about supply/demand dynamics", "source_url": "URL from the news data"},
    {"text": "Key bullet point 5 about regulatory/policy impacts", "source_url": "URL from the news data"}
  ],
  "predictions": {
    "crude_oil": {"direction": "UP|DOWN|SIDEWAYS", "confidence": 85, "reasoning": "..."},
    "natural_gas": {"direction": "UP|DOWN|SIDEWAYS", "confidence": 75, "reasoning": "..."},
    "energy_stocks": {"direction": "UP|DOWN|SIDEWAYS", "confidence": 80, "reasoning": "..."},
    "utilities": {"direction": "UP|DOWN|SIDEWAYS", "confidence": 70, "reasoning": "..."}
  },
  "reasoning": "Comprehensive analysis connecting news, market data and predictions. Minimum 200 words."
}"""

GUIDELINES = """ANALYSIS GUIDELINES:
- Base predictions on fundamental analysis, technical indicators, and market sentiment
- Consider seasonal patterns, inventory levels, geopolitical events
- Confidence levels should reflect uncertainty and risk factors
- Provide specific reasoning for each prediction
- Include both bullish and bearish scenarios
- Consider time horizons of 1-7 days for predictions
- Factor in correlation between different energy sectors"""


def format_news(news: list[NewsItem]) -> str:
    if not news:
        return "No news articles available today."

    blocks = []
    for i, article in enumerate(news, start=1):
        published = parse_published(article.published_date)
        date_str = published.strftime("%Y-%m-%d") if published else article.published_date
        blocks.append(
            f"{i}. {article.title}\n"
            f"   Published: {date_str}\n"
            f"   URL: {article.url}\n"
            f"   Content: {article.content[:PROMPT_NEWS_CONTENT_CHARS]}...\n"
            f"   Relevance Score: {article.score}"
        )
    return "\n\n".join(blocks)


def format_market(quotes: list[MarketQuote]) -> str:
    if not quotes:
        return "No market data available today."
    return "\n".join(
        f"{q.symbol}: ${q.price:.2f} ({q.change_percent:+.2f}%)" for q in quotes
    )


def build_analysis_prompt(news: list[NewsItem], quotes: list[MarketQuote]) -> str:
    return (
        "Analyze the following data and provide a comprehensive market analysis.\n\n"
        f"CURRENT NEWS DATA:\n{format_news(news)}\n\n"
        f"CURRENT MARKET DATA:\n{format_market(quotes)}\n\n"
        "Provide your analysis in the following JSON format. For each summary bullet "
        "point, include the most relevant source URL from the news data provided:\n\n"
        f"{RESPONSE_FORMAT}\n\n"
        f"{GUIDELINES}"
    )
