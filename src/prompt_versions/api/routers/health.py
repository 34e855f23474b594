"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from pydantic import BaseModel
import structlog

from ...core.config import settings
from ...core.database import check_database_health

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    service: str
    timestamp: str
    version: str = settings.app_version
    environment: str = settings.environment


class DetailedHealthResponse(HealthResponse):
    """Detailed health check response model."""
    components: Dict[str, bool]
    details: Dict[str, Any]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        Health status information
    """
    return HealthResponse(status="healthy", service="prompt-versions", timestamp=_now())


@router.get("/detailed", response_model=DetailedHealthResponse, summary="Detailed health check")
async def detailed_health_check() -> DetailedHealthResponse:
    """Health check including database connectivity.

    Returns:
        Per-component health and details
    """
    database = await check_database_health()
    database_ok = database.get("status") == "healthy"
    if not database_ok:
        logger.warning("Database unhealthy", **database)

    return DetailedHealthResponse(
        status="healthy" if database_ok else "degraded",
        service="prompt-versions",
        timestamp=_now(),
        components={"database": database_ok},
        details={"database": database},
    )
