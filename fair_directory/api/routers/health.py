"""
Liveness and readiness probes.

`/health` answers as long as the process is serving requests; `/ready`
also requires the catalog database to answer a trivial query.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from fair_directory.api.dependencies.database import get_db
from fair_directory.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Probe result."""

    status: str
    service: str
    version: str
    timestamp: datetime


def _probe(state: str) -> HealthResponse:
    return HealthResponse(
        status=state,
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    return _probe("healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness probe",
    description="503 when the database cannot be reached.",
)
async def readiness_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Readiness check failed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e
    return _probe("ready")
