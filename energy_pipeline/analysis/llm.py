"""Market analysis through a hosted language model (litellm).

The analyzer makes exactly one model call per `analyze()`; retries and
circuit breaking are applied by the orchestrator around it.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

import litellm

from ..config.constants import (
    DEFAULT_LLM_MODEL,
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    LLM_TIMEOUT,
)
from ..core.errors import (
    NetworkError,
    PipelineError,
    RateLimitError,
    RequestTimeoutError,
    classify_exception,
)
from ..core.types import Analysis, AnalysisQuality, MarketQuote, NewsItem
from ..observability.logger import get_logger
from .prompts import SYSTEM_PROMPT, build_analysis_prompt
from .schema import SOURCE, parse_analysis

logger = get_logger(__name__)

os.environ.setdefault("LITELLM_LOG", "WARNING")
litellm.drop_params = True


def input_quality(news: list[NewsItem], quotes: list[MarketQuote]) -> AnalysisQuality:
    """An analysis built without news or without quotes is only partial."""
    if news and quotes:
        return AnalysisQuality.FULL
    return AnalysisQuality.PARTIAL


def translate_llm_error(error: Exception) -> PipelineError:
    """Map a litellm exception onto the pipeline hierarchy by type.

    Provider 5xx and connection failures are transient; anything litellm
    does not type falls back to message classification.
    """
    if isinstance(error, litellm.Timeout):
        return RequestTimeoutError(str(error) or "Model request timed out", source=SOURCE)
    if isinstance(error, litellm.RateLimitError):
        return RateLimitError(str(error), source=SOURCE)
    if isinstance(
        error,
        (litellm.APIConnectionError, litellm.InternalServerError, litellm.ServiceUnavailableError),
    ):
        return NetworkError(str(error) or "Model provider unavailable", source=SOURCE)

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int) and status_code >= 500:
        return NetworkError(f"Model provider returned {status_code}: {error}", source=SOURCE)

    return classify_exception(error, source=SOURCE)


class LiteLLMAnalyzer:
    """Analyzer backed by any litellm provider (Groq by default).

    Usage:
        analyzer = LiteLLMAnalyzer(api_key=settings.groq_api_key)
        analysis = await analyzer.analyze(news, quotes)
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_LLM_MODEL,
        *,
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = LLM_MAX_TOKENS,
        timeout: float = LLM_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def _request(self, prompt: str) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
            "timeout": self.timeout,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        return kwargs

    async def complete(self, prompt: str) -> str | None:
        """Send one prompt and return the raw content of the first choice."""
        try:
            response = await asyncio.wait_for(
                litellm.acompletion(**self._request(prompt)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"{self.model} did not answer within {self.timeout}s",
                timeout_seconds=self.timeout,
                source=SOURCE,
            ) from e
        except PipelineError:
            raise
        except Exception as e:
            raise translate_llm_error(e) from e

        if not response or not response.choices:
            return None
        return response.choices[0].message.content

    async def analyze(self, news: list[NewsItem], quotes: list[MarketQuote]) -> Analysis:
        quality = input_quality(news, quotes)
        prompt = build_analysis_prompt(news, quotes)

        logger.debug(
            f"Requesting analysis from {self.model}",
            extra={"news": len(news), "quotes": len(quotes)},
        )
        content = await self.complete(prompt)
        analysis = parse_analysis(content, quality)

        logger.info(
            "Analysis generated",
            extra={"quality": quality.value, "predictions": analysis.predictions_generated},
        )
        return analysis
