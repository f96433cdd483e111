"""Backend API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from app.core.config import settings
from app.core.dependencies import (
    get_breakers,
    get_monitor,
    get_orchestrator,
    get_storage,
    get_telegram_client,
)
from app.core.rate_limit import limiter
from app.main import app
from fastapi.testclient import TestClient

from energy_pipeline import CircuitBreakerRegistry, HealthMonitor
from energy_pipeline.core.errors import StorageError
from energy_pipeline.core.types import (
    DependencyCategory,
    DependencyStatus,
    RunResponse,
    Subscriber,
)
from energy_pipeline.storage import MemoryStorage

SECRET = "test-cron-secret"


@pytest.fixture
def mock_orchestrator():
    """Orchestrator whose run succeeds."""
    mock = MagicMock()
    mock.run = AsyncMock(
        return_value=RunResponse(success=True, data={"analysis_id": "abc", "execution_time_ms": 5})
    )
    return mock


@pytest.fixture
def health_monitor(notifier):
    return HealthMonitor(notifier)


@pytest.fixture
def breakers(clock):
    return CircuitBreakerRegistry(clock=clock)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def client(monkeypatch, mock_orchestrator, health_monitor, breakers, storage):
    """Create test client with mocked pipeline collaborators."""
    monkeypatch.setattr(settings, "cron_secret", SECRET)
    limiter.reset()
    app.dependency_overrides[get_orchestrator] = lambda: mock_orchestrator
    app.dependency_overrides[get_monitor] = lambda: health_monitor
    app.dependency_overrides[get_breakers] = lambda: breakers
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_telegram_client] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestRootEndpoint:
    """Test service banner."""

    def test_root_endpoint(self, client):
        """Test root endpoint returns app info."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Energy Pulse API"
        assert "version" in data
        assert data["docs"] == "/docs"


class TestScheduledTrigger:
    """GET /api/cron with bearer auth."""

    def test_requires_bearer(self, client, mock_orchestrator):
        response = client.get("/api/cron")
        assert response.status_code == 401
        assert response.json()["success"] is False
        mock_orchestrator.run.assert_not_awaited()

    def test_wrong_secret(self, client, mock_orchestrator):
        response = client.get("/api/cron", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}
        mock_orchestrator.run.assert_not_awaited()

    def test_runs_pipeline(self, client, mock_orchestrator):
        response = client.get("/api/cron", headers={"Authorization": f"Bearer {SECRET}"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"analysis_id": "abc", "execution_time_ms": 5},
        }
        mock_orchestrator.run.assert_awaited_once_with(trigger="scheduled")

    def test_failed_run_is_500(self, client, mock_orchestrator):
        mock_orchestrator.run.return_value = RunResponse(success=False, error="boom")

        response = client.get("/api/cron", headers={"Authorization": f"Bearer {SECRET}"})

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "boom"
        assert "timestamp" in body

    def test_unset_secret_rejects_everything(self, client, monkeypatch):
        monkeypatch.setattr(settings, "cron_secret", "")
        response = client.get("/api/cron", headers={"Authorization": "Bearer "})
        assert response.status_code == 401


class TestManualTrigger:
    """POST /api/cron with the secret in the body."""

    def test_trigger_analysis(self, client, mock_orchestrator):
        response = client.post(
            "/api/cron", json={"action": "trigger_analysis", "auth_token": SECRET}
        )
        assert response.status_code == 200
        mock_orchestrator.run.assert_awaited_once_with(trigger="manual")

    def test_bad_token(self, client, mock_orchestrator):
        response = client.post("/api/cron", json={"action": "trigger_analysis", "auth_token": "x"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}
        mock_orchestrator.run.assert_not_awaited()

    def test_auth_checked_before_action(self, client):
        response = client.post("/api/cron", json={"action": "drop_tables"})
        assert response.status_code == 401

    def test_invalid_action(self, client, mock_orchestrator):
        response = client.post("/api/cron", json={"action": "drop_tables", "auth_token": SECRET})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid action"}
        mock_orchestrator.run.assert_not_awaited()

    def test_missing_action(self, client):
        response = client.post("/api/cron", json={"auth_token": SECRET})
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert "action" in body["error"]

    def test_rate_limited(self, client):
        payload = {"action": "trigger_analysis", "auth_token": SECRET}
        codes = [client.post("/api/cron", json=payload).status_code for _ in range(6)]
        assert codes[:5] == [200] * 5
        assert codes[5] == 429


class TestHealthEndpoint:
    """GET /api/health."""

    def test_healthy(self, client, breakers):
        breakers.get("news")
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["system"]["news_api_status"] == "healthy"
        assert data["breakers"] == [
            {
                "name": "news",
                "state": "closed",
                "consecutive_failures": 0,
                "failure_threshold": 3,
                "retry_after_seconds": 0.0,
            }
        ]
        assert data["uptime_seconds"] >= 0

    def test_degraded_is_503(self, client, health_monitor, breakers):
        health_monitor.record_dependency_status(DependencyCategory.MARKET, DependencyStatus.FAILED)
        market = breakers.get("market")
        for _ in range(3):
            market.record_failure()

        response = client.get("/api/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["system"]["market_api_status"] == "failed"
        assert data["breakers"][0]["state"] == "open"

    def test_degraded_dependency_is_still_healthy(self, client, health_monitor):
        health_monitor.record_dependency_status(DependencyCategory.NEWS, DependencyStatus.DEGRADED)
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_live_subscriber_count(self, client, health_monitor, storage):
        health_monitor.record_delivery(5, 5)
        storage.subscribers = [
            Subscriber(id="u1", chat_id="100"),
            Subscriber(id="u2", chat_id="200"),
        ]

        data = client.get("/api/health").json()

        assert data["system"]["subscriber_count"] == 2
        assert data["system"]["messages_sent"] == 5

    def test_services_block(self, client, health_monitor):
        health_monitor.record_dependency_status(DependencyCategory.AI, DependencyStatus.DEGRADED)

        services = client.get("/api/health").json()["services"]

        assert services == {
            "database": "healthy",
            "storage_backend": "memory",
            "telegram": "not_configured",
            "apis": {"news": "healthy", "market": "healthy", "ai": "degraded"},
        }

    def test_unreachable_store_is_503(self, client, storage, health_monitor):
        health_monitor.record_delivery(3, 3)
        storage.get_active_subscribers = AsyncMock(
            side_effect=StorageError("Failed to load subscribers", table="users")
        )

        response = client.get("/api/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["services"]["database"] == "failed"
        assert data["system"]["subscriber_count"] == 3


class TestHealthSummary:
    """POST /api/health."""

    def test_sends_summary(self, client, notifier):
        response = client.post(
            "/api/health", json={"action": "send_health_summary", "auth_token": SECRET}
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Health summary sent"}
        assert len(notifier.messages) == 1
        assert "Health Report" in notifier.messages[0]

    def test_unauthorized(self, client, notifier):
        response = client.post(
            "/api/health", json={"action": "send_health_summary", "auth_token": "wrong"}
        )
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}
        assert notifier.messages == []

    def test_invalid_action(self, client):
        response = client.post("/api/health", json={"action": "reboot", "auth_token": SECRET})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid action"}
