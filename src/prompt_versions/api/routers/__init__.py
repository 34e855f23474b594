"""API routers for the prompt versions service."""

from . import health, versions

__all__ = ["health", "versions"]
