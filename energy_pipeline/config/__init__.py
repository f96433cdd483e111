"""Configuration module for the energy pipeline."""

from .constants import (
    AI_BREAKER,
    ENERGY_SYMBOLS,
    MARKET_BREAKER,
    NEWS_BREAKER,
    NEWS_QUERIES,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "NEWS_BREAKER",
    "MARKET_BREAKER",
    "AI_BREAKER",
    "ENERGY_SYMBOLS",
    "NEWS_QUERIES",
]
