"""Energy Pulse: resilient daily energy-market briefing pipeline."""

from .monitoring.health import HealthMonitor
from .orchestrator import OrchestratorConfig, PipelineOrchestrator
from .resilience.circuit_breaker import CircuitBreakerRegistry

__version__ = "1.0.0"

__all__ = [
    "CircuitBreakerRegistry",
    "HealthMonitor",
    "OrchestratorConfig",
    "PipelineOrchestrator",
    "__version__",
]
