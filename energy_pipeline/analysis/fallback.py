"""Synthetic analysis used when the model cannot produce one."""

from __future__ import annotations

from ..config.constants import FALLBACK_CONFIDENCE, FALLBACK_SOURCE_URL
from ..core.types import (
    Analysis,
    AnalysisQuality,
    Direction,
    Prediction,
    PredictionCategory,
    SummaryPoint,
)

FALLBACK_SUMMARY = [
    "Market analysis temporarily unavailable due to technical issues",
    "Please check back later for updated insights",
    "Current market conditions require careful monitoring",
    "Energy sector showing mixed signals",
    "Recommend staying informed on key developments",
]


def build_fallback_analysis(reason: str) -> Analysis:
    """Neutral analysis covering every category, tagged as fallback."""
    return Analysis(
        summary=[SummaryPoint(text=text, source_url=FALLBACK_SOURCE_URL) for text in FALLBACK_SUMMARY],
        predictions={
            category: Prediction(
                direction=Direction.SIDEWAYS,
                confidence=FALLBACK_CONFIDENCE,
                reasoning="Analysis temporarily unavailable",
            )
            for category in PredictionCategory
        },
        reasoning=(
            "Market analysis is temporarily unavailable due to technical issues "
            f"({reason}). Please check back later for comprehensive insights into "
            "energy market conditions and predictions."
        ),
        quality=AnalysisQuality.FALLBACK,
    )
