"""Health aggregation and operator alerting."""

from .health import (
    AlertSeverity,
    HealthAlert,
    HealthMonitor,
    HealthSnapshot,
    OverallStatus,
)

__all__ = [
    "AlertSeverity",
    "HealthAlert",
    "HealthMonitor",
    "HealthSnapshot",
    "OverallStatus",
]
