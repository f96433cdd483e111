"""Health reporting endpoints."""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from app.core.auth import require_secret
from app.core.config import settings
from app.core.dependencies import get_breakers, get_monitor, get_storage, get_telegram_client
from app.core.rate_limit import RATE_LIMITS, limiter
from app.models.health import (
    ActionResponse,
    ApiStatuses,
    HealthAction,
    HealthRequest,
    HealthResponse,
    ServicesStatus,
)
from energy_pipeline import CircuitBreakerRegistry, HealthMonitor
from energy_pipeline.core.errors import StorageError
from energy_pipeline.core.types import utc_now
from energy_pipeline.delivery import TelegramClient
from energy_pipeline.monitoring import OverallStatus
from energy_pipeline.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

_started_at = time.monotonic()


@router.get("", response_model=HealthResponse)
async def get_health(
    monitor: HealthMonitor = Depends(get_monitor),
    breakers: CircuitBreakerRegistry = Depends(get_breakers),
    storage: Storage = Depends(get_storage),
    telegram: TelegramClient | None = Depends(get_telegram_client),
):
    """Latest run snapshot, live subscriber count and breaker states.

    503 while any dependency is failed or the subscriber store is unreachable.
    """
    snapshot = monitor.get_health()
    system = snapshot.to_dict()

    database = "healthy"
    try:
        system["subscriber_count"] = len(await storage.get_active_subscribers())
    except StorageError as e:
        logger.error(f"Health check could not load subscribers: {e}")
        database = "failed"

    healthy = snapshot.status == OverallStatus.HEALTHY and database == "healthy"
    body = HealthResponse(
        status=OverallStatus.HEALTHY.value if healthy else OverallStatus.DEGRADED.value,
        timestamp=utc_now(),
        version=settings.app_version,
        uptime_seconds=round(time.monotonic() - _started_at, 1),
        system=system,
        services=ServicesStatus(
            database=database,
            storage_backend=storage.name,
            telegram="healthy" if telegram is not None else "not_configured",
            apis=ApiStatuses(
                news=snapshot.news.value,
                market=snapshot.market.value,
                ai=snapshot.ai.value,
            ),
        ),
        breakers=list(breakers.snapshot().values()),
    )
    return JSONResponse(content=body.model_dump(mode="json"), status_code=200 if healthy else 503)


@router.post("", response_model=ActionResponse)
@limiter.limit(RATE_LIMITS["summary"])
async def health_action(
    request: Request,
    body: HealthRequest,
    monitor: HealthMonitor = Depends(get_monitor),
):
    """Send the daily health digest to the admin chat."""
    require_secret(body.auth_token)

    if body.action != HealthAction.SEND_HEALTH_SUMMARY.value:
        raise HTTPException(status_code=400, detail="Invalid action")

    await monitor.send_daily_summary()
    return ActionResponse(success=True, message="Health summary sent")
