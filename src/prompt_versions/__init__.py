"""Prompt Versions - commit history and field-level diffs for prompt records."""

__version__ = "0.1.0"

from .core.config import settings

__all__ = ["settings"]
