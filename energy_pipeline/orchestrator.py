"""Pipeline orchestrator.

Runs one full briefing cycle:

    news ─┐
          ├─> analysis ─> persist (analysis | news | market) ─> deliver ─> health check
  market ─┘

Each upstream stage runs behind its own named circuit breaker; the
analysis additionally retries with backoff inside its breaker. A
failing stage degrades the run (empty input, fallback analysis,
per-store or per-subscriber loss) but never aborts it. Only an error in
the orchestrator's own control flow yields a failure response.

Usage:
    orchestrator = PipelineOrchestrator(
        news_source=news,
        market_source=market,
        analyzer=analyzer,
        store=storage,
        delivery=delivery,
        breakers=CircuitBreakerRegistry(),
        monitor=HealthMonitor(),
    )
    response = await orchestrator.run()
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Callable

from .analysis.fallback import build_fallback_analysis
from .config.constants import (
    AI_BREAKER,
    ANALYSIS_BASE_DELAY,
    ANALYSIS_MAX_ATTEMPTS,
    MARKET_BREAKER,
    NEWS_BREAKER,
    REASONING_PREVIEW_CHARS,
)
from .config.settings import Settings
from .core.errors import DeliveryError
from .core.interfaces import (
    AnalysisStore,
    Analyzer,
    Delivery,
    MarketSource,
    NewsSource,
)
from .core.types import (
    Analysis,
    AnalysisQuality,
    DeliveryReport,
    DependencyCategory,
    DependencyStatus,
    MarketQuote,
    NewsItem,
    PersistenceReport,
    PipelineResult,
    RunResponse,
    StoredAnalysis,
    StoreOutcome,
)
from .monitoring.health import HealthMonitor
from .observability.logger import get_logger, log_context
from .observability.metrics import RunMetrics
from .resilience.circuit_breaker import CircuitBreakerRegistry
from .resilience.outcome import Ok, guarded
from .resilience.retry import RetryExecutor, Sleep

logger = get_logger(__name__)


@dataclass
class OrchestratorConfig:
    """Tunables of the analysis retry and the response preview."""

    analysis_max_attempts: int = ANALYSIS_MAX_ATTEMPTS
    analysis_base_delay: float = ANALYSIS_BASE_DELAY
    reasoning_preview_chars: int = REASONING_PREVIEW_CHARS

    @classmethod
    def from_settings(cls, settings: Settings) -> OrchestratorConfig:
        return cls(
            analysis_max_attempts=settings.analysis_max_attempts,
            analysis_base_delay=settings.analysis_base_delay,
        )


class PipelineOrchestrator:
    """Sequences the pipeline stages around breakers, retry and health."""

    def __init__(
        self,
        *,
        news_source: NewsSource,
        market_source: MarketSource,
        analyzer: Analyzer,
        store: AnalysisStore,
        delivery: Delivery | None,
        breakers: CircuitBreakerRegistry,
        monitor: HealthMonitor,
        config: OrchestratorConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.news_source = news_source
        self.market_source = market_source
        self.analyzer = analyzer
        self.store = store
        self.delivery = delivery
        self.breakers = breakers
        self.monitor = monitor
        self.config = config or OrchestratorConfig()
        self.sleep = sleep

    # === Entry point ===

    async def run(self, trigger: str = "scheduled") -> RunResponse:
        """Run one cycle. Never raises; failures become `success=False`."""
        metrics = RunMetrics.start()

        with log_context(run_id=metrics.run_id, trigger=trigger):
            logger.info("Starting energy analysis run")
            try:
                result = await self.run_pipeline(metrics)
            except Exception as e:
                logger.exception("Pipeline run failed")
                return RunResponse(success=False, error=str(e) or type(e).__name__)

            logger.info(
                f"Run completed in {result.execution_time_ms}ms",
                extra={"analysis_id": result.final_analysis.id},
            )
            return RunResponse(success=True, data=self.build_response_data(result))

    async def run_pipeline(self, metrics: RunMetrics | None = None) -> PipelineResult:
        """Run every stage and return the full result.

        Only the orchestrator's own bugs escape from here.
        """
        metrics = metrics or RunMetrics.start()
        self.monitor.start_run()

        with metrics.stage("news"):
            news, news_ok = await self._fetch_stage(
                NEWS_BREAKER, DependencyCategory.NEWS, self.news_source.fetch
            )
        with metrics.stage("market"):
            quotes, market_ok = await self._fetch_stage(
                MARKET_BREAKER, DependencyCategory.MARKET, self.market_source.fetch
            )
        with metrics.stage("analysis"):
            analysis = await self._analysis_stage(news, quotes, inputs_complete=news_ok and market_ok)
        with metrics.stage("persistence"):
            persistence = await self._persist(analysis, news, quotes)

        final = persistence.stored_analysis or StoredAnalysis.temporary(analysis)
        if final.is_temporary:
            logger.warning(f"Analysis not persisted, reporting as {final.id}")

        with metrics.stage("delivery"):
            delivery = await self._deliver(final)

        execution_time_ms = metrics.complete()
        self.monitor.record_execution_time(execution_time_ms)
        self.monitor.record_delivery(delivery.subscriber_count, delivery.delivered)

        await self.monitor.check_health_and_alert()

        logger.debug("Stage timings", extra={"stages": metrics.stage_durations})
        return PipelineResult(
            run_id=metrics.run_id,
            news=news,
            quotes=quotes,
            analysis=analysis,
            persistence=persistence,
            final_analysis=final,
            delivery=delivery,
            execution_time_ms=execution_time_ms,
        )

    # === Stages ===

    async def _fetch_stage(
        self,
        breaker_name: str,
        category: DependencyCategory,
        fetch: Callable[[], Any],
    ) -> tuple[list[Any], bool]:
        """Run a fetch behind its breaker. Failure yields an empty list."""
        with log_context(stage=category.value, dependency=breaker_name):
            outcome = await guarded(self.breakers.get(breaker_name), fetch)

            if isinstance(outcome, Ok):
                items = list(outcome.value or [])
                status = DependencyStatus.HEALTHY if items else DependencyStatus.DEGRADED
                self.monitor.record_dependency_status(category, status)
                logger.info(f"{category.value} stage returned {len(items)} item(s)")
                return items, True

            logger.error(f"{category.value} stage failed: {outcome.describe()}")
            self.monitor.record_dependency_status(category, DependencyStatus.FAILED)
            return [], False

    async def _analysis_stage(
        self,
        news: list[NewsItem],
        quotes: list[MarketQuote],
        *,
        inputs_complete: bool,
    ) -> Analysis:
        with log_context(stage="analysis", dependency=AI_BREAKER):
            retry = RetryExecutor(
                max_attempts=self.config.analysis_max_attempts,
                base_delay=self.config.analysis_base_delay,
                description="AI analysis",
                sleep=self.sleep,
            )
            outcome = await guarded(
                self.breakers.get(AI_BREAKER),
                self.analyzer.analyze,
                news,
                quotes,
                retry=retry,
            )

            if isinstance(outcome, Ok):
                analysis: Analysis = outcome.value
                if analysis.quality == AnalysisQuality.FULL and not inputs_complete:
                    analysis = replace(analysis, quality=AnalysisQuality.PARTIAL)

                self.monitor.record_dependency_status(DependencyCategory.AI, DependencyStatus.HEALTHY)
                self.monitor.record_analysis_quality(analysis.quality)
                return analysis

            reason = outcome.describe()
            logger.error(f"Analysis failed, using fallback: {reason}")
            self.monitor.record_dependency_status(DependencyCategory.AI, DependencyStatus.FAILED)
            self.monitor.record_analysis_quality(AnalysisQuality.FALLBACK, "complete failure")
            return build_fallback_analysis(reason)

    async def _persist(
        self,
        analysis: Analysis,
        news: list[NewsItem],
        quotes: list[MarketQuote],
    ) -> PersistenceReport:
        """Store the three artifacts concurrently; each succeeds or fails alone."""
        with log_context(stage="persistence"):
            analysis_result, news_result, market_result = await asyncio.gather(
                self.store.store_analysis(analysis),
                self.store.store_news(news),
                self.store.store_market(quotes),
                return_exceptions=True,
            )

            report = PersistenceReport(
                analysis=_store_outcome("analysis", analysis_result),
                news=_store_outcome("news", news_result),
                market=_store_outcome("market", market_result),
            )
            if report.analysis.ok:
                report.stored_analysis = analysis_result

            if report.all_ok:
                logger.info("All artifacts stored")
            return report

    async def _deliver(self, stored: StoredAnalysis) -> DeliveryReport:
        with log_context(stage="delivery"):
            if self.delivery is None:
                logger.warning("No delivery channel configured, skipping delivery")
                return DeliveryReport()

            try:
                return await self.delivery.deliver(stored)
            except DeliveryError as e:
                logger.error(f"Delivery failed: {e}")
                return DeliveryReport(subscriber_count=e.subscriber_count, delivered=0)
            except Exception as e:
                logger.error(f"Delivery failed: {e}")
                return DeliveryReport()

    # === Response ===

    def build_response_data(self, result: PipelineResult) -> dict[str, Any]:
        analysis = result.analysis
        preview = analysis.reasoning[: self.config.reasoning_preview_chars] + "..."
        return {
            "analysis_id": result.final_analysis.id,
            "execution_time_ms": result.execution_time_ms,
            "summary": {
                "news_articles": len(result.news),
                "market_symbols": len(result.quotes),
                "predictions_generated": analysis.predictions_generated,
                "analysis_quality": analysis.quality.value,
                "persistence": result.persistence.to_dict(),
                "delivery": result.delivery.to_dict(),
            },
            "analysis": {
                "summary": [point.to_dict() for point in analysis.summary],
                "predictions": analysis.predictions_dict(),
                "reasoning": preview,
            },
        }


def _store_outcome(name: str, result: Any) -> StoreOutcome:
    if isinstance(result, BaseException):
        logger.error(f"Failed to store {name}: {result}")
        return StoreOutcome(name=name, ok=False, error=str(result) or type(result).__name__)
    return StoreOutcome(name=name, ok=True)
