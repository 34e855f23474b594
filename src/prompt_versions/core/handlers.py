"""Exception handlers for the FastAPI application."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog

from .exceptions import VersioningError

logger = structlog.get_logger(__name__)


def error_response(message: str, code: str, status_code: int) -> JSONResponse:
    """Build the ``{error, code}`` envelope shared by every failure."""
    return JSONResponse(status_code=status_code, content={"error": message, "code": code})


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers for the application."""

    @app.exception_handler(VersioningError)
    async def versioning_exception_handler(request: Request, exc: VersioningError) -> JSONResponse:
        """Handle versioning exceptions."""
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "Prompt versions error",
            error=exc.message,
            error_code=exc.error_code,
            status_code=exc.status_code,
            path=request.url.path,
            method=request.method,
        )
        return error_response(exc.message, exc.error_code, exc.status_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle general exceptions."""
        logger.error(
            "Unhandled exception",
            error=str(exc),
            path=request.url.path,
            method=request.method,
            exc_info=True,
        )
        return error_response(
            "An unexpected error occurred",
            "SERVER_ERROR",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc) -> JSONResponse:
        """Handle 404 errors."""
        logger.warning(
            "Resource not found",
            path=request.url.path,
            method=request.method,
        )
        return error_response(
            f"The requested resource {request.url.path} was not found",
            "NOT_FOUND",
            status.HTTP_404_NOT_FOUND,
        )

    @app.exception_handler(405)
    async def method_not_allowed_handler(request: Request, exc) -> JSONResponse:
        """Handle 405 errors."""
        logger.warning(
            "Method not allowed",
            path=request.url.path,
            method=request.method,
        )
        return error_response(
            f"Method {request.method} is not allowed for {request.url.path}",
            "METHOD_NOT_ALLOWED",
            status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    logger.info("Exception handlers configured")
