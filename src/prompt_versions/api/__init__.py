"""FastAPI route handlers."""

from .routers import health, versions

__all__ = ["health", "versions"]
