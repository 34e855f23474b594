"""Router configuration and registration."""

from fastapi import FastAPI
import structlog

from ..api.routers import health, versions

logger = structlog.get_logger(__name__)


def configure_routes(app: FastAPI) -> None:
    """Configure all routes for the application."""
    app.include_router(health.router)
    app.include_router(versions.router)

    logger.info("Routes configured", routes=["health", "prompt-versions"])
