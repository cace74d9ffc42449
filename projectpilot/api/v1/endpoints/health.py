"""
Health and readiness endpoints
"""
import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from projectpilot.config import settings
from projectpilot.core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model"""
    status: str
    version: str
    environment: str
    uptime: float
    timestamp: str


class ReadinessResponse(BaseModel):
    """Readiness check response model"""
    status: str
    version: str
    environment: str
    database: dict
    timestamp: str


# Track app start time for uptime calculation
app_start_time = time.time()


@router.get("/healthz", response_model=HealthResponse)
async def health_check():
    """Liveness probe: app version and uptime"""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        uptime=time.time() - app_start_time,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/readyz", response_model=ReadinessResponse)
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Readiness probe: 200 only when the database answers"""
    start_time = time.time()
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content=ReadinessResponse(
                status="not_ready",
                version=settings.app_version,
                environment=settings.environment,
                database={"status": "unhealthy"},
                timestamp=datetime.now(timezone.utc).isoformat(),
            ).model_dump(),
        )

    return ReadinessResponse(
        status="ready",
        version=settings.app_version,
        environment=settings.environment,
        database={"status": "healthy", "response_time": time.time() - start_time},
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
