"""Shared-secret checks for the trigger endpoints."""

import hmac
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings

logger = logging.getLogger(__name__)

optional_security = HTTPBearer(auto_error=False)


def is_valid_secret(token: str | None) -> bool:
    """Constant-time comparison against CRON_SECRET. An unset secret matches nothing."""
    if not settings.cron_secret or not token:
        return False
    return hmac.compare_digest(token.encode(), settings.cron_secret.encode())


def require_secret(token: str | None) -> None:
    if not is_valid_secret(token):
        logger.warning("Rejected trigger with invalid secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


async def verify_cron_bearer(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security),
) -> None:
    """Dependency for scheduler calls: `Authorization: Bearer <CRON_SECRET>`."""
    require_secret(credentials.credentials if credentials else None)
