"""Construction of the default pipeline from settings.

Each process builds one breaker registry and one health monitor and
hands them to every orchestrator it creates.
"""

from __future__ import annotations

from .analysis.llm import LiteLLMAnalyzer
from .config.settings import Settings
from .delivery.subscribers import SubscriberDelivery
from .delivery.telegram import TelegramClient, TelegramNotifier
from .monitoring.health import HealthMonitor
from .observability.logger import get_logger
from .orchestrator import OrchestratorConfig, PipelineOrchestrator
from .resilience.circuit_breaker import CircuitBreakerRegistry
from .sources.market import YFinanceMarketSource
from .sources.news import TavilyNewsSource
from .storage.base import Storage
from .storage.memory import MemoryStorage
from .storage.supabase_storage import SupabaseStorage

logger = get_logger(__name__)


def create_breaker_registry(settings: Settings) -> CircuitBreakerRegistry:
    return CircuitBreakerRegistry(
        failure_threshold=settings.breaker_failure_threshold,
        reset_timeout=settings.breaker_reset_timeout,
    )


def create_telegram_client(settings: Settings) -> TelegramClient | None:
    if not settings.telegram_bot_token:
        return None
    return TelegramClient(settings.telegram_bot_token, timeout=settings.request_timeout)


def create_health_monitor(
    settings: Settings,
    telegram: TelegramClient | None = None,
) -> HealthMonitor:
    notifier = None
    if telegram is not None and settings.admin_telegram_chat_id:
        notifier = TelegramNotifier(telegram, settings.admin_telegram_chat_id)
    else:
        logger.info("No admin chat configured, alerts will only be logged")

    return HealthMonitor(
        notifier,
        execution_budget_ms=settings.execution_budget_ms,
        slow_warn_ms=settings.slow_execution_warn_ms,
        slow_alert_ms=settings.slow_execution_alert_ms,
    )


def create_storage(settings: Settings) -> Storage:
    if settings.has_supabase:
        return SupabaseStorage(settings.supabase_url, settings.supabase_key)

    logger.warning("Supabase not configured, results are kept in memory only")
    return MemoryStorage()


def create_orchestrator(
    settings: Settings,
    *,
    breakers: CircuitBreakerRegistry,
    monitor: HealthMonitor,
    telegram: TelegramClient | None = None,
    storage: Storage | None = None,
) -> PipelineOrchestrator:
    """Wire the default collaborators around shared breakers and monitor."""
    storage = storage or create_storage(settings)

    delivery = None
    if telegram is not None:
        delivery = SubscriberDelivery(telegram, storage)

    return PipelineOrchestrator(
        news_source=TavilyNewsSource(
            api_key=settings.tavily_api_key,
            max_attempts=settings.news_max_attempts,
            base_delay=settings.news_base_delay,
            timeout=settings.request_timeout,
        ),
        market_source=YFinanceMarketSource(),
        analyzer=LiteLLMAnalyzer(settings.groq_api_key, settings.llm_model),
        store=storage,
        delivery=delivery,
        breakers=breakers,
        monitor=monitor,
        config=OrchestratorConfig.from_settings(settings),
    )
