"""Observability infrastructure for the energy pipeline.

Provides structured logging and run timing.
"""

from .logger import LogContext, get_logger, log_context, setup_logging
from .metrics import RunMetrics, StageTimer, new_run_id

__all__ = [
    "LogContext",
    "get_logger",
    "log_context",
    "setup_logging",
    "RunMetrics",
    "StageTimer",
    "new_run_id",
]
