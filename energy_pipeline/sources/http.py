"""Mapping of httpx failures onto the pipeline error hierarchy."""

from __future__ import annotations

import httpx

from ..core.errors import (
    NetworkError,
    PipelineError,
    RateLimitError,
    RequestTimeoutError,
)


def check_response(response: httpx.Response, source: str) -> None:
    """Raise a typed error for a non-2xx response."""
    if response.is_success:
        return

    if response.status_code == 429:
        retry_after = response.headers.get("retry-after")
        raise RateLimitError(
            f"{source} rate limit exceeded",
            retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            source=source,
        )

    message = f"{source} API error: {response.status_code} {response.reason_phrase}"
    if response.status_code >= 500:
        raise NetworkError(message, source=source)
    raise PipelineError(message, source=source)


def translate_transport_error(error: httpx.HTTPError, source: str) -> PipelineError:
    if isinstance(error, httpx.TimeoutException):
        return RequestTimeoutError(f"{source} request timed out", source=source)
    return NetworkError(f"{source} request failed: {error}", source=source)
