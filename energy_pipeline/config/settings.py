"""Pipeline settings using Pydantic. No side effects at import time."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    ANALYSIS_BASE_DELAY,
    ANALYSIS_MAX_ATTEMPTS,
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_LLM_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RESET_TIMEOUT,
    EXECUTION_BUDGET_MS,
    NEWS_BASE_DELAY,
    NEWS_MAX_ATTEMPTS,
    SLOW_EXECUTION_ALERT_MS,
    SLOW_EXECUTION_WARN_MS,
)


class Settings(BaseSettings):
    """Pipeline settings with validation.

    Settings are loaded from environment variables and .env file.
    .env is read only when Settings() is instantiated.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Database ===
    supabase_url: str | None = None
    supabase_key: str | None = None

    # === Upstream APIs ===
    tavily_api_key: str | None = None
    groq_api_key: str | None = None
    llm_model: str = DEFAULT_LLM_MODEL

    # === Telegram ===
    telegram_bot_token: str | None = None
    admin_telegram_chat_id: str | None = None

    # === Circuit Breaker ===
    breaker_failure_threshold: Annotated[int, Field(gt=0)] = DEFAULT_FAILURE_THRESHOLD
    breaker_reset_timeout: Annotated[float, Field(ge=0)] = DEFAULT_RESET_TIMEOUT

    # === Retry ===
    analysis_max_attempts: Annotated[int, Field(gt=0)] = ANALYSIS_MAX_ATTEMPTS
    analysis_base_delay: Annotated[float, Field(ge=0)] = ANALYSIS_BASE_DELAY
    news_max_attempts: Annotated[int, Field(gt=0)] = NEWS_MAX_ATTEMPTS
    news_base_delay: Annotated[float, Field(ge=0)] = NEWS_BASE_DELAY
    request_timeout: Annotated[float, Field(gt=0)] = DEFAULT_REQUEST_TIMEOUT

    # === Execution budget (ms) ===
    execution_budget_ms: Annotated[int, Field(gt=0)] = EXECUTION_BUDGET_MS
    slow_execution_warn_ms: Annotated[int, Field(gt=0)] = SLOW_EXECUTION_WARN_MS
    slow_execution_alert_ms: Annotated[int, Field(gt=0)] = SLOW_EXECUTION_ALERT_MS

    # === Logging ===
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @property
    def has_supabase(self) -> bool:
        """Check if Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_key)

    @property
    def has_telegram(self) -> bool:
        """Check if the Telegram bot token is configured."""
        return bool(self.telegram_bot_token)

    @property
    def has_admin_channel(self) -> bool:
        """Check if operator alerts can be delivered."""
        return bool(self.telegram_bot_token and self.admin_telegram_chat_id)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This is the recommended way to access settings to avoid
    repeated .env file parsing.
    """
    return Settings()
