"""Health check endpoints."""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from loontijdvak.api.dependencies import DbSession, Engine
from loontijdvak.calculators.types import WagePeriodType
from loontijdvak.clock import utc_now
from loontijdvak.errors import InvalidPeriodTypeError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession) -> HealthResponse:
    """Check API and database health."""
    db_status = "unhealthy"
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=utc_now(),
        database=db_status,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(engine: Engine, response: Response) -> dict[str, Any]:
    """Readiness check for container orchestration.

    Ready once every wage period type resolves in the engine's period table.
    """
    missing = []
    for period_type in WagePeriodType:
        try:
            engine.periods_per_year(period_type)
        except InvalidPeriodTypeError:
            missing.append(period_type.value)

    if missing:
        logger.warning("Period table is missing wage period types: %s", ", ".join(missing))
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "missing_period_types": missing}
    return {"status": "ready", "period_types": len(WagePeriodType)}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
