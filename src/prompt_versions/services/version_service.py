"""Dispatch of validated version requests."""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog

from ..core.config import settings
from ..core.exceptions import RequestTimeoutError, VersioningError, classify_collaborator_error
from ..core.logging import log_version_action
from ..models.requests import (
    CleanupRequest,
    CommitRequest,
    DiffRequest,
    HistoryRequest,
    PinRequest,
    PreviewRequest,
    RollbackRequest,
    TagRequest,
    VersionRequest,
)
from ..models.versions import CommitType, VersionHistory, VersionMetadata, VersionPreview, VersionSummary
from .diff_service import DiffOrchestrator
from .version_store import VersionStore

logger = structlog.get_logger(__name__)


class VersionService:
    """Runs one version request against a store under a deadline."""

    def __init__(self, store: VersionStore, timeout_seconds: Optional[float] = None):
        self.store = store
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds
        self.diff_orchestrator = DiffOrchestrator(store)
        self._handlers: Dict[type, Callable[[Any, float], Awaitable[Dict[str, Any]]]] = {
            CommitRequest: self.commit,
            RollbackRequest: self.rollback,
            HistoryRequest: self.history,
            DiffRequest: self.diff,
            TagRequest: self.tag,
            PinRequest: self.pin,
            PreviewRequest: self.preview,
            CleanupRequest: self.cleanup,
        }

    async def handle(self, request: VersionRequest, started_at: Optional[float] = None) -> Dict[str, Any]:
        """Run a request and return its JSON result.

        Args:
            request: Validated request
            started_at: ``time.monotonic()`` when the HTTP request arrived, so
                time spent authenticating counts against the deadline

        Raises:
            VersioningError: Any failure, already classified
        """
        start_time = started_at if started_at is not None else time.monotonic()
        deadline = start_time + self.timeout_seconds
        handler = self._handlers[type(request)]

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            self._log(request, start_time, success=False, error_code="TIMEOUT")
            raise RequestTimeoutError(timeout_seconds=self.timeout_seconds)

        try:
            result = await asyncio.wait_for(handler(request, deadline), timeout=remaining)
        except VersioningError as e:
            self._log(request, start_time, success=False, error_code=e.error_code)
            raise
        except asyncio.TimeoutError as e:
            self._log(request, start_time, success=False, error_code="TIMEOUT")
            raise RequestTimeoutError(timeout_seconds=self.timeout_seconds) from e
        except Exception as e:
            error = classify_collaborator_error(e)
            logger.error(
                "Version action failed",
                action=request.action,
                error=str(e),
                error_code=error.error_code,
                exc_info=True,
            )
            raise error from e

        self._log(request, start_time, success=True)
        return result

    def _log(self, request: VersionRequest, start_time: float, success: bool, **kwargs) -> None:
        log_version_action(
            logger,
            action=request.action,
            duration_ms=round((time.monotonic() - start_time) * 1000, 2),
            success=success,
            **kwargs
        )

    async def commit(self, request: CommitRequest, deadline: float) -> Dict[str, Any]:
        result = await self.store.create_version(
            request.prompt_row_id,
            request.commit_message or None,
            CommitType.MANUAL.value,
            request.tag_name,
        )
        return result.model_dump()

    async def rollback(self, request: RollbackRequest, deadline: float) -> Dict[str, Any]:
        result = await self.store.rollback_to_version(
            request.prompt_row_id,
            request.version_id,
            request.create_backup,
        )
        return result.model_dump()

    async def history(self, request: HistoryRequest, deadline: float) -> Dict[str, Any]:
        limit = request.limit or settings.history_default_limit
        versions, total = await self.store.list_versions(request.prompt_row_id, limit, request.offset)
        history = VersionHistory(
            versions=[VersionSummary.model_validate(version) for version in versions],
            total=total or 0,
        )
        return history.model_dump(mode="json")

    async def diff(self, request: DiffRequest, deadline: float) -> Dict[str, Any]:
        result = await self.diff_orchestrator.diff(request, deadline=deadline)
        return result.to_wire()

    async def tag(self, request: TagRequest, deadline: float) -> Dict[str, Any]:
        await self.store.set_tag(request.version_id, request.tag_name)
        return {"success": True}

    async def pin(self, request: PinRequest, deadline: float) -> Dict[str, Any]:
        await self.store.set_pinned(request.version_id, request.is_pinned)
        return {"success": True}

    async def preview(self, request: PreviewRequest, deadline: float) -> Dict[str, Any]:
        version = await self.store.get_version(request.version_id)
        preview = VersionPreview(
            snapshot=version.snapshot or {},
            metadata=VersionMetadata.model_validate(version),
        )
        return preview.model_dump(mode="json")

    async def cleanup(self, request: CleanupRequest, deadline: float) -> Dict[str, Any]:
        result = await self.store.cleanup_old_versions(
            request.max_age_days or settings.cleanup_max_age_days,
            request.min_versions or settings.cleanup_min_versions,
        )
        return result.model_dump()
