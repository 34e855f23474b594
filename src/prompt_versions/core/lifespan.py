"""Application lifecycle management."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from .config import settings
from .database import close_database, init_database

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        "Starting Prompt Versions",
        version=settings.app_version,
        environment=settings.environment,
        debug=settings.debug,
        port=settings.port,
        request_timeout_seconds=settings.request_timeout_seconds,
    )

    db_success = await init_database()
    if not db_success:
        logger.warning("Application starting without database connection")

    logger.info("Startup completed")

    yield

    logger.info("Shutting down Prompt Versions")
    await close_database()
    logger.info("Shutdown completed")
