"""Trigger request models."""

from enum import Enum

from pydantic import BaseModel, Field


class CronAction(str, Enum):
    """Allowed manual trigger actions."""

    TRIGGER_ANALYSIS = "trigger_analysis"


class CronRequest(BaseModel):
    """Manual trigger request."""

    action: str = Field(..., max_length=64)
    auth_token: str | None = Field(None, max_length=256)
