"""Main FastAPI application entry point."""

from typing import Any, Dict

from fastapi import FastAPI
import structlog

from .core.config import settings
from .core.handlers import configure_exception_handlers
from .core.lifespan import lifespan
from .core.logging import setup_logging
from .core.middleware import configure_middleware
from .core.routes import configure_routes

# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Prompt Versions",
        description="Commit history, rollback and field-level diffs for prompt records",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment == "development" or settings.debug else None,
        redoc_url="/redoc" if settings.environment == "development" or settings.debug else None,
    )

    configure_middleware(app)
    configure_exception_handlers(app)
    configure_routes(app)

    @app.get("/", response_model=Dict[str, Any])
    async def root() -> Dict[str, Any]:
        """Root endpoint with service information."""
        return {
            "service": "Prompt Versions",
            "version": settings.app_version,
            "environment": settings.environment,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "detailed_health": "/health/detailed",
                "prompt_versions": "/prompt-versions",
                "docs": "/docs" if settings.debug or settings.environment == "development" else "disabled",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "Starting Prompt Versions from main",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

    uvicorn.run(
        "prompt_versions.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
