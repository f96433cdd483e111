"""Application configuration."""

import logging

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from energy_pipeline import __version__
from energy_pipeline.config import get_settings as get_pipeline_settings

load_dotenv()

logger = logging.getLogger(__name__)

# Default allowed origins
DEFAULT_CORS_ORIGINS = [
    "https://energy-pulse.vercel.app",
    "http://localhost:3000",
]


def mask_secret(value: str | None, visible_chars: int = 4) -> str:
    """Mask a secret value for safe logging."""
    if not value:
        return "(not set)"
    if len(value) <= visible_chars * 2:
        return "*" * len(value)
    return f"{value[:visible_chars]}...{value[-visible_chars:]}"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    app_name: str = "Energy Pulse API"
    app_version: str = __version__
    debug: bool = False

    # Shared secret for the scheduler and manual triggers
    cron_secret: str = ""

    # CORS - comma-separated origins or use default
    cors_origins: list[str] = DEFAULT_CORS_ORIGINS

    def log_config_summary(self) -> None:
        """Log configuration summary with masked secrets."""
        pipeline = get_pipeline_settings()

        logger.info("=== Configuration Summary ===")
        logger.info(f"App: {self.app_name} v{self.app_version}")
        logger.info(f"Debug: {self.debug}")
        logger.info(f"CRON_SECRET: {mask_secret(self.cron_secret)}")
        logger.info(f"SUPABASE_URL: {mask_secret(pipeline.supabase_url, 20)}")
        logger.info(f"SUPABASE_KEY: {mask_secret(pipeline.supabase_key)}")
        logger.info(f"TAVILY_API_KEY: {mask_secret(pipeline.tavily_api_key)}")
        logger.info(f"GROQ_API_KEY: {mask_secret(pipeline.groq_api_key)}")
        logger.info(f"TELEGRAM_BOT_TOKEN: {mask_secret(pipeline.telegram_bot_token)}")
        logger.info(f"LLM model: {pipeline.llm_model}")
        logger.info(f"CORS Origins: {len(self.cors_origins)} domains")
        logger.info("=============================")

        if not self.cron_secret:
            logger.warning("CRON_SECRET is not set; trigger endpoints will reject every call")


settings = Settings()
