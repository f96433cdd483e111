"""Health endpoint models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HealthAction(str, Enum):
    """Allowed health actions."""

    SEND_HEALTH_SUMMARY = "send_health_summary"


class HealthRequest(BaseModel):
    """Health action request."""

    action: str = Field(..., max_length=64)
    auth_token: str | None = Field(None, max_length=256)


class SystemHealth(BaseModel):
    """Snapshot of the latest run."""

    news_api_status: str
    market_api_status: str
    ai_api_status: str
    analysis_quality: str
    execution_time_ms: int
    subscriber_count: int
    messages_sent: int
    timestamp: datetime


class BreakerStatus(BaseModel):
    name: str
    state: str
    consecutive_failures: int
    failure_threshold: int
    retry_after_seconds: float


class ApiStatuses(BaseModel):
    news: str
    market: str
    ai: str


class ServicesStatus(BaseModel):
    """Reachability of the storage and delivery backends."""

    database: str
    storage_backend: str
    telegram: str
    apis: ApiStatuses


class HealthResponse(BaseModel):
    """Service health with per-dependency breaker state."""

    status: str
    timestamp: datetime
    version: str
    uptime_seconds: float
    system: SystemHealth
    services: ServicesStatus
    breakers: list[BreakerStatus]


class ActionResponse(BaseModel):
    success: bool
    message: str
