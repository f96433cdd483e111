"""Process health aggregation and operator alerting.

The monitor keeps the latest observed status of each guarded dependency
plus run-level metrics, and turns them into at most one consolidated
alert per evaluation.

Usage:
    monitor = HealthMonitor(notifier=TelegramNotifier(client, admin_chat_id))

    monitor.start_run()
    monitor.record_dependency_status(DependencyCategory.NEWS, DependencyStatus.FAILED)
    monitor.record_analysis_quality(AnalysisQuality.FULL)
    monitor.record_execution_time(12_400)
    monitor.record_delivery(subscriber_count=40, messages_sent=40)

    await monitor.check_health_and_alert()  # one alert, severity "error"
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from ..config.constants import (
    EXECUTION_BUDGET_MS,
    SLOW_EXECUTION_ALERT_MS,
    SLOW_EXECUTION_WARN_MS,
)
from ..core.interfaces import Notifier
from ..core.types import (
    AnalysisQuality,
    DependencyCategory,
    DependencyStatus,
    utc_now,
)
from ..observability.logger import get_logger

logger = get_logger(__name__)


class AlertSeverity(str, Enum):
    """Severity of a consolidated operator alert."""

    WARNING = "warning"
    ERROR = "error"


class OverallStatus(str, Enum):
    """Derived status reported by the health endpoint."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"


DEPENDENCY_LABELS = {
    DependencyCategory.NEWS: "News",
    DependencyCategory.MARKET: "Market",
    DependencyCategory.AI: "AI",
}

STATUS_EMOJI = {
    DependencyStatus.HEALTHY: "✅",
    DependencyStatus.DEGRADED: "⚠️",
    DependencyStatus.FAILED: "❌",
}


@dataclass(frozen=True)
class HealthSnapshot:
    """Latest recorded state of the pipeline. Immutable; replaced on record."""

    news: DependencyStatus = DependencyStatus.HEALTHY
    market: DependencyStatus = DependencyStatus.HEALTHY
    ai: DependencyStatus = DependencyStatus.HEALTHY
    analysis_quality: AnalysisQuality = AnalysisQuality.FULL
    execution_time_ms: int = 0
    subscriber_count: int = 0
    messages_sent: int = 0
    timestamp: datetime = field(default_factory=utc_now)

    def dependency_statuses(self) -> dict[DependencyCategory, DependencyStatus]:
        return {
            DependencyCategory.NEWS: self.news,
            DependencyCategory.MARKET: self.market,
            DependencyCategory.AI: self.ai,
        }

    @property
    def failed_dependencies(self) -> list[DependencyCategory]:
        return [
            category
            for category, status in self.dependency_statuses().items()
            if status == DependencyStatus.FAILED
        ]

    @property
    def delivery_failed(self) -> bool:
        """Nobody got the briefing although someone should have."""
        return self.messages_sent == 0 and self.subscriber_count > 0

    @property
    def status(self) -> OverallStatus:
        if self.failed_dependencies:
            return OverallStatus.DEGRADED
        return OverallStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        return {
            "news_api_status": self.news.value,
            "market_api_status": self.market.value,
            "ai_api_status": self.ai.value,
            "analysis_quality": self.analysis_quality.value,
            "execution_time_ms": self.execution_time_ms,
            "subscriber_count": self.subscriber_count,
            "messages_sent": self.messages_sent,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class HealthAlert:
    """One consolidated alert covering every issue found in a snapshot."""

    severity: AlertSeverity
    issues: tuple[str, ...]
    snapshot: HealthSnapshot

    def to_message(self, app_name: str) -> str:
        emoji = "🚨" if self.severity == AlertSeverity.ERROR else "⚠️"
        bullets = "\n".join(f"• {issue}" for issue in self.issues)
        status = json.dumps(self.snapshot.to_dict(), indent=2)
        return (
            f"{emoji} *{app_name} System Alert*\n\n"
            f"System issues detected:\n{bullets}\n\n"
            f"Time: {utc_now().strftime('%Y-%m-%d %H:%M:%S')} UTC\n"
            f"Status: {status}"
        )


class HealthMonitor:
    """Holds the health snapshot for one process and raises alerts.

    Notifier failures are logged and never propagated.
    """

    def __init__(
        self,
        notifier: Notifier | None = None,
        *,
        app_name: str = "Energy Pulse",
        execution_budget_ms: int = EXECUTION_BUDGET_MS,
        slow_warn_ms: int = SLOW_EXECUTION_WARN_MS,
        slow_alert_ms: int = SLOW_EXECUTION_ALERT_MS,
    ) -> None:
        self.notifier = notifier
        self.app_name = app_name
        self.execution_budget_ms = execution_budget_ms
        self.slow_warn_ms = slow_warn_ms
        self.slow_alert_ms = slow_alert_ms
        self._snapshot = HealthSnapshot()

    def start_run(self) -> None:
        """Reset to optimistic defaults so the snapshot describes only this run."""
        self._snapshot = HealthSnapshot()

    def _update(self, **changes: Any) -> None:
        self._snapshot = replace(self._snapshot, timestamp=utc_now(), **changes)

    # === Recording ===

    def record_dependency_status(
        self,
        category: DependencyCategory | str,
        status: DependencyStatus | str,
    ) -> None:
        category = DependencyCategory(category)
        status = DependencyStatus(status)
        self._update(**{category.value: status})

        if status == DependencyStatus.FAILED:
            logger.warning(
                f"{category.value} dependency failure detected",
                extra={"dependency": category.value},
            )

    def record_analysis_quality(
        self,
        quality: AnalysisQuality | str,
        detail: str | None = None,
    ) -> None:
        quality = AnalysisQuality(quality)
        self._update(analysis_quality=quality)

        if quality == AnalysisQuality.FALLBACK:
            logger.warning(
                "Fallback analysis used",
                extra={"detail": (detail or "")[:100]},
            )

    def record_execution_time(self, ms: int) -> None:
        self._update(execution_time_ms=int(ms))

        if ms > self.slow_warn_ms:
            logger.warning(
                f"Slow execution detected: {ms}ms",
                extra={"budget_ms": self.execution_budget_ms},
            )

    def record_delivery(self, subscriber_count: int, messages_sent: int) -> None:
        self._update(subscriber_count=subscriber_count, messages_sent=messages_sent)

    # === Reading ===

    def get_health(self) -> HealthSnapshot:
        """Current snapshot. Frozen, so callers cannot mutate monitor state."""
        return self._snapshot

    def overall_status(self) -> OverallStatus:
        return self._snapshot.status

    # === Alerting ===

    def evaluate(self) -> HealthAlert | None:
        """Apply the alert rules to the current snapshot."""
        health = self._snapshot
        issues: list[str] = []

        for category in health.failed_dependencies:
            issues.append(f"{DEPENDENCY_LABELS[category]} API is down")

        if health.analysis_quality == AnalysisQuality.FALLBACK:
            issues.append("Using fallback analysis (AI unavailable)")

        if health.execution_time_ms > self.slow_alert_ms:
            issues.append(f"Slow execution: {health.execution_time_ms}ms")

        if health.delivery_failed:
            issues.append("No messages sent despite having subscribers")

        if not issues:
            return None

        is_error = bool(health.failed_dependencies) or health.delivery_failed
        return HealthAlert(
            severity=AlertSeverity.ERROR if is_error else AlertSeverity.WARNING,
            issues=tuple(issues),
            snapshot=health,
        )

    async def check_health_and_alert(self) -> HealthAlert | None:
        """Send a single consolidated alert if any rule fires.

        Returns:
            The alert that was raised, or None when everything is fine
        """
        alert = self.evaluate()
        if alert is None:
            return None

        await self.send_admin_alert(alert.to_message(self.app_name), alert.severity)
        return alert

    async def send_admin_alert(
        self,
        message: str,
        severity: AlertSeverity = AlertSeverity.WARNING,
    ) -> bool:
        """Deliver an operator message; returns False instead of raising."""
        if self.notifier is None:
            logger.warning(
                "Admin alert (no channel configured)",
                extra={"severity": severity.value, "alert": message},
            )
            return False

        try:
            await self.notifier.send(message)
        except Exception as e:
            logger.error(f"Failed to send admin alert: {e}", extra={"severity": severity.value})
            return False

        logger.info("Admin alert sent", extra={"severity": severity.value})
        return True

    # === Digest ===

    def digest_label(self) -> str:
        health = self._snapshot
        if len(health.failed_dependencies) == len(DependencyCategory):
            return "🚨 CRITICAL"
        if (
            health.failed_dependencies
            or health.analysis_quality == AnalysisQuality.FALLBACK
            or health.delivery_failed
        ):
            return "⚠️ DEGRADED"
        return "✅ HEALTHY"

    def format_daily_summary(self) -> str:
        health = self._snapshot
        return (
            f"📊 *Daily {self.app_name} Health Report*\n\n"
            f"🔍 APIs: News {STATUS_EMOJI[health.news]} | "
            f"Market {STATUS_EMOJI[health.market]} | AI {STATUS_EMOJI[health.ai]}\n"
            f"📈 Analysis Quality: {health.analysis_quality.value.upper()}\n"
            f"⏱️ Execution Time: {health.execution_time_ms}ms\n"
            f"👥 Subscribers: {health.subscriber_count}\n"
            f"📱 Messages Sent: {health.messages_sent}\n\n"
            f"System Status: {self.digest_label()}"
        )

    async def send_daily_summary(self) -> str:
        """Send the digest regardless of alert rules. Returns the digest text."""
        summary = self.format_daily_summary()

        if self.notifier is None:
            logger.info("Daily health summary (no channel configured)", extra={"summary": summary})
            return summary

        try:
            await self.notifier.send(summary)
        except Exception as e:
            logger.error(f"Failed to send health summary: {e}")
        return summary
