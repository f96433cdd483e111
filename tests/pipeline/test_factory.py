"""Tests for energy_pipeline/factory.py."""

from energy_pipeline.config import Settings
from energy_pipeline.delivery import SubscriberDelivery, TelegramNotifier
from energy_pipeline.factory import (
    create_breaker_registry,
    create_health_monitor,
    create_orchestrator,
    create_storage,
    create_telegram_client,
)
from energy_pipeline.storage import MemoryStorage, SupabaseStorage


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestFactory:
    """Default wiring from settings."""

    def test_breaker_registry_settings(self):
        registry = create_breaker_registry(
            _settings(breaker_failure_threshold=5, breaker_reset_timeout=30)
        )
        breaker = registry.get("news")
        assert breaker.failure_threshold == 5
        assert breaker.reset_timeout == 30

    def test_no_telegram_without_token(self):
        assert create_telegram_client(_settings(telegram_bot_token=None)) is None

    def test_monitor_with_admin_chat(self):
        settings = _settings(telegram_bot_token="t", admin_telegram_chat_id="999")
        monitor = create_health_monitor(settings, create_telegram_client(settings))
        assert isinstance(monitor.notifier, TelegramNotifier)
        assert monitor.notifier.chat_id == "999"

    def test_monitor_without_admin_chat(self):
        settings = _settings(telegram_bot_token="t")
        monitor = create_health_monitor(settings, create_telegram_client(settings))
        assert monitor.notifier is None

    def test_storage_selection(self):
        assert isinstance(create_storage(_settings()), MemoryStorage)
        supabase = create_storage(_settings(supabase_url="https://x.supabase.co", supabase_key="k"))
        assert isinstance(supabase, SupabaseStorage)

    def test_orchestrator_shares_breakers_and_monitor(self):
        settings = _settings(telegram_bot_token="t", analysis_max_attempts=2)
        telegram = create_telegram_client(settings)
        breakers = create_breaker_registry(settings)
        monitor = create_health_monitor(settings, telegram)

        orchestrator = create_orchestrator(
            settings, breakers=breakers, monitor=monitor, telegram=telegram
        )

        assert orchestrator.breakers is breakers
        assert orchestrator.monitor is monitor
        assert isinstance(orchestrator.delivery, SubscriberDelivery)
        assert orchestrator.config.analysis_max_attempts == 2

    def test_orchestrator_without_telegram_skips_delivery(self):
        settings = _settings()
        orchestrator = create_orchestrator(
            settings,
            breakers=create_breaker_registry(settings),
            monitor=create_health_monitor(settings),
        )
        assert orchestrator.delivery is None
