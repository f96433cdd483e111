"""Core infrastructure for the energy pipeline."""

from .errors import (
    CircuitOpenError,
    DataNotFoundError,
    DeliveryError,
    NetworkError,
    PipelineError,
    RateLimitError,
    RequestTimeoutError,
    RetryExhaustedError,
    StorageError,
    ValidationError,
)
from .interfaces import (
    AnalysisStore,
    Analyzer,
    Delivery,
    MarketSource,
    NewsSource,
    Notifier,
)
from .types import (
    Analysis,
    AnalysisQuality,
    DeliveryReport,
    DependencyCategory,
    DependencyStatus,
    Direction,
    MarketQuote,
    NewsItem,
    PersistenceReport,
    PipelineResult,
    Prediction,
    PredictionCategory,
    RunResponse,
    StoredAnalysis,
    StoreOutcome,
    Subscriber,
    SummaryPoint,
)

__all__ = [
    # Errors
    "PipelineError",
    "RequestTimeoutError",
    "RateLimitError",
    "NetworkError",
    "DataNotFoundError",
    "ValidationError",
    "CircuitOpenError",
    "RetryExhaustedError",
    "StorageError",
    "DeliveryError",
    # Interfaces
    "NewsSource",
    "MarketSource",
    "Analyzer",
    "AnalysisStore",
    "Delivery",
    "Notifier",
    # Types
    "Direction",
    "PredictionCategory",
    "DependencyStatus",
    "DependencyCategory",
    "AnalysisQuality",
    "NewsItem",
    "MarketQuote",
    "Prediction",
    "SummaryPoint",
    "Analysis",
    "StoredAnalysis",
    "Subscriber",
    "StoreOutcome",
    "PersistenceReport",
    "DeliveryReport",
    "PipelineResult",
    "RunResponse",
]
