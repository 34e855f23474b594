"""FastAPI middleware configuration."""

import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import structlog

from .config import settings

logger = structlog.get_logger(__name__)


def configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware."""
    if settings.cors_origins != "*":
        origins = [origin.strip() for origin in settings.cors_origins.split(",")]
    else:
        origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    logger.info("CORS middleware configured", allowed_origins=origins[:3] if len(origins) > 3 else origins)


def add_custom_middleware(app: FastAPI) -> None:
    """Add custom middleware to the application."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Bind a request ID, log the request and stamp timing headers."""
        request_id = str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.time()
        # request deadlines are measured from here
        request.state.started_at = time.monotonic()
        logger.debug(
            "Request started",
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time=round(process_time, 4),
        )

        return response

    logger.info("Custom middleware configured")


def configure_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application."""
    configure_cors(app)
    add_custom_middleware(app)
