"""Error hierarchy for the energy pipeline.

All pipeline errors inherit from PipelineError.
Use `is_retryable` property to determine if an error can be retried.
"""

from __future__ import annotations

from typing import Any


class PipelineError(Exception):
    """Base error for all pipeline errors.

    Attributes:
        message: Error description
        source: Upstream dependency name (if applicable)
    """

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
    ) -> None:
        self.source = source
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether this error can be retried."""
        return False

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "source": self.source,
            "is_retryable": self.is_retryable,
        }


class RequestTimeoutError(PipelineError):
    """Upstream request timed out.

    This is retryable - the server might be temporarily slow.
    """

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        timeout_seconds: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds

    @property
    def is_retryable(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["timeout_seconds"] = self.timeout_seconds
        return d


class RateLimitError(PipelineError):
    """Rate limit exceeded (HTTP 429).

    Retryable after waiting for `retry_after` seconds.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

    @property
    def is_retryable(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["retry_after"] = self.retry_after
        return d


class NetworkError(PipelineError):
    """Network connectivity error.

    This is retryable - might be a temporary network issue.
    """

    def __init__(
        self,
        message: str = "Network error",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

    @property
    def is_retryable(self) -> bool:
        return True


class DataNotFoundError(PipelineError):
    """The upstream answered but had nothing for us.

    Not retryable - the data simply doesn't exist.
    """

    def __init__(
        self,
        message: str = "Data not found",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class ValidationError(PipelineError):
    """Upstream payload failed validation (e.g. malformed LLM JSON).

    Retryable: a language model may well answer correctly on the next try.
    """

    def __init__(
        self,
        message: str = "Validation error",
        *,
        field: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.field = field

    @property
    def is_retryable(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["field"] = self.field
        return d


class CircuitOpenError(PipelineError):
    """Circuit breaker is open - failing fast.

    NOT retryable immediately. Wait `retry_after` seconds.
    """

    def __init__(
        self,
        message: str = "Circuit breaker is open",
        *,
        breaker: str | None = None,
        retry_after: float = 0.0,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("source", breaker)
        super().__init__(message, **kwargs)
        self.breaker = breaker
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["breaker"] = self.breaker
        d["retry_after"] = round(self.retry_after, 3)
        return d


class RetryExhaustedError(PipelineError):
    """All retry attempts failed. `last_error` is the final underlying failure."""

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        last_error: BaseException,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.attempts = attempts
        self.last_error = last_error

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["attempts"] = self.attempts
        d["last_error"] = f"{type(self.last_error).__name__}: {self.last_error}"
        return d


class StorageError(PipelineError):
    """Persistence of an artifact failed."""

    def __init__(
        self,
        message: str = "Storage error",
        *,
        table: str | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("source", "supabase")
        super().__init__(message, **kwargs)
        self.table = table

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["table"] = self.table
        return d


class DeliveryError(PipelineError):
    """Delivery to subscribers failed as a whole (not per subscriber)."""

    def __init__(
        self,
        message: str = "Delivery failed",
        *,
        subscriber_count: int = 0,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("source", "telegram")
        super().__init__(message, **kwargs)
        self.subscriber_count = subscriber_count

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["subscriber_count"] = self.subscriber_count
        return d


def classify_exception(error: Exception, source: str | None = None) -> PipelineError:
    """Classify a generic exception into a PipelineError.

    Args:
        error: The exception to classify
        source: Upstream name for context

    Returns:
        Appropriate PipelineError subclass
    """
    if isinstance(error, PipelineError):
        return error

    error_str = str(error).lower()

    rate_limit_indicators = ["429", "rate limit", "too many requests", "throttl"]
    if any(indicator in error_str for indicator in rate_limit_indicators):
        return RateLimitError(str(error), source=source)

    timeout_indicators = ["timeout", "timed out", "deadline exceeded"]
    if isinstance(error, TimeoutError) or any(
        indicator in error_str for indicator in timeout_indicators
    ):
        return RequestTimeoutError(str(error) or "Request timed out", source=source)

    network_indicators = [
        "connection",
        "network",
        "unreachable",
        "refused",
        "reset",
        "broken pipe",
    ]
    if isinstance(error, ConnectionError) or any(
        indicator in error_str for indicator in network_indicators
    ):
        return NetworkError(str(error) or "Network error", source=source)

    not_found_indicators = ["not found", "no data", "empty", "missing"]
    if any(indicator in error_str for indicator in not_found_indicators):
        return DataNotFoundError(str(error), source=source)

    return PipelineError(str(error), source=source)
