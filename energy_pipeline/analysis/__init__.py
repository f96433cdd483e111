"""Market analysis: language-model analyzer and the fallback analysis."""

from .fallback import build_fallback_analysis
from .llm import LiteLLMAnalyzer, input_quality
from .prompts import build_analysis_prompt
from .schema import parse_analysis

__all__ = [
    "LiteLLMAnalyzer",
    "build_analysis_prompt",
    "build_fallback_analysis",
    "input_quality",
    "parse_analysis",
]
