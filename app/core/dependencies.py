"""Process-wide pipeline collaborators.

One breaker registry and one health monitor live for the lifetime of
the service, so breaker state and the latest snapshot carry across
scheduled runs. Routes get them through `Depends` so tests can swap
them via `app.dependency_overrides`.
"""

from functools import lru_cache

from energy_pipeline import CircuitBreakerRegistry, HealthMonitor, PipelineOrchestrator
from energy_pipeline.config import Settings, get_settings
from energy_pipeline.delivery import TelegramClient
from energy_pipeline.factory import (
    create_breaker_registry,
    create_health_monitor,
    create_orchestrator,
    create_storage,
    create_telegram_client,
)
from energy_pipeline.storage import Storage


def get_pipeline_settings() -> Settings:
    return get_settings()


@lru_cache
def get_telegram_client() -> TelegramClient | None:
    return create_telegram_client(get_settings())


@lru_cache
def get_storage() -> Storage:
    return create_storage(get_settings())


@lru_cache
def get_breakers() -> CircuitBreakerRegistry:
    return create_breaker_registry(get_settings())


@lru_cache
def get_monitor() -> HealthMonitor:
    return create_health_monitor(get_settings(), get_telegram_client())


@lru_cache
def get_orchestrator() -> PipelineOrchestrator:
    return create_orchestrator(
        get_settings(),
        breakers=get_breakers(),
        monitor=get_monitor(),
        telegram=get_telegram_client(),
        storage=get_storage(),
    )


async def close_clients() -> None:
    """Release the shared HTTP client on shutdown."""
    if get_telegram_client.cache_info().currsize:
        client = get_telegram_client()
        if client is not None:
            await client.aclose()
