"""Pipeline trigger endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from app.core.auth import require_secret, verify_cron_bearer
from app.core.dependencies import get_orchestrator
from app.core.rate_limit import RATE_LIMITS, limiter
from app.models.cron import CronAction, CronRequest
from energy_pipeline import PipelineOrchestrator
from energy_pipeline.core.types import RunResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


def _to_json(response: RunResponse) -> JSONResponse:
    return JSONResponse(
        content=response.to_dict(),
        status_code=200 if response.success else 500,
    )


@router.get("", dependencies=[Depends(verify_cron_bearer)])
async def scheduled_run(
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Scheduled daily run, called by the platform cron."""
    logger.info("Scheduled pipeline run triggered")
    response = await orchestrator.run(trigger="scheduled")
    return _to_json(response)


@router.post("")
@limiter.limit(RATE_LIMITS["trigger"])
async def manual_run(
    request: Request,
    body: CronRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Manual run with the shared secret in the body."""
    require_secret(body.auth_token)

    if body.action != CronAction.TRIGGER_ANALYSIS.value:
        raise HTTPException(status_code=400, detail="Invalid action")

    logger.info("Manual pipeline run triggered")
    response = await orchestrator.run(trigger="manual")
    return _to_json(response)
