"""Services for the prompt versions API."""

from .auth_client import AuthClient
from .diff_service import DiffOrchestrator, diff_snapshots
from .version_service import VersionService
from .version_store import SqlVersionStore, VersionStore

__all__ = [
    "AuthClient",
    "DiffOrchestrator",
    "diff_snapshots",
    "VersionService",
    "SqlVersionStore",
    "VersionStore",
]
