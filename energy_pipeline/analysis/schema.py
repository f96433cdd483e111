"""Validation of the model's JSON answer.

The language model is an untrusted producer: its answer is parsed into
these pydantic models before it becomes an `Analysis`.
"""

from __future__ import annotations

import json

import pydantic
from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.errors import ValidationError
from ..core.types import (
    Analysis,
    AnalysisQuality,
    Direction,
    Prediction,
    PredictionCategory,
    SummaryPoint,
)

SOURCE = "llm"


class SummaryPointModel(BaseModel):
    text: str = Field(min_length=1)
    source_url: str = ""


class PredictionModel(BaseModel):
    direction: Direction
    confidence: int = Field(ge=0, le=100)
    reasoning: str = ""

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("confidence", mode="before")
    @classmethod
    def round_confidence(cls, v: object) -> object:
        if isinstance(v, float):
            return round(v)
        return v


class AnalysisModel(BaseModel):
    summary: list[SummaryPointModel] = Field(min_length=1)
    predictions: dict[PredictionCategory, PredictionModel]
    reasoning: str = Field(min_length=1)

    @field_validator("predictions", mode="before")
    @classmethod
    def drop_unknown_categories(cls, v: object) -> object:
        if isinstance(v, dict):
            known = {c.value for c in PredictionCategory}
            return {k: p for k, p in v.items() if k in known}
        return v

    @model_validator(mode="after")
    def require_all_categories(self) -> AnalysisModel:
        missing = [c.value for c in PredictionCategory if c not in self.predictions]
        if missing:
            raise ValueError(f"Missing prediction for {', '.join(missing)}")
        return self

    def to_analysis(self, quality: AnalysisQuality) -> Analysis:
        return Analysis(
            summary=[SummaryPoint(text=p.text, source_url=p.source_url) for p in self.summary],
            predictions={
                category: Prediction(
                    direction=p.direction,
                    confidence=p.confidence,
                    reasoning=p.reasoning,
                )
                for category, p in self.predictions.items()
            },
            reasoning=self.reasoning,
            quality=quality,
        )


def parse_analysis(content: str | None, quality: AnalysisQuality) -> Analysis:
    """Parse and validate a raw model answer.

    Raises:
        ValidationError: empty answer, invalid JSON or wrong structure
    """
    if not content or not content.strip():
        raise ValidationError("Empty response from language model", source=SOURCE)

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Response is not valid JSON: {e}", source=SOURCE) from e

    try:
        model = AnalysisModel.model_validate(payload)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(
            f"Invalid analysis response structure: {first.get('msg')}",
            field=field or None,
            source=SOURCE,
        ) from e

    return model.to_analysis(quality)
