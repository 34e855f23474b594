"""Core configuration and settings."""

from .config import settings
from .exceptions import ValidationError, VersioningError
from .logging import setup_logging

__all__ = ["settings", "ValidationError", "VersioningError", "setup_logging"]
