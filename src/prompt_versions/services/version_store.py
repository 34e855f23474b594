"""Persistence collaborator for prompt versions.

Version creation, rollback and retention cleanup live in stored procedures
(``create_prompt_version``, ``rollback_prompt_version``,
``cleanup_old_prompt_versions``); this module only calls them and reads the
version tables.
"""

import json
from typing import Any, Dict, List, Optional, Protocol, Tuple

import structlog
from sqlalchemy import func, select, text, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, classify_collaborator_error
from ..models.versions import (
    CleanupResult,
    CommitResult,
    CommitType,
    Prompt,
    PromptVersion,
    RollbackResult,
)

logger = structlog.get_logger(__name__)

Snapshot = Dict[str, Any]


class VersionStore(Protocol):
    """What the service needs from persistence."""

    async def fetch_version_snapshot(self, version_id: str) -> Snapshot: ...

    async def fetch_latest_snapshot(self, prompt_row_id: str) -> Optional[Snapshot]: ...

    async def fetch_live_record(self, prompt_row_id: str) -> Snapshot: ...

    async def get_version(self, version_id: str) -> PromptVersion: ...

    async def list_versions(
        self, prompt_row_id: str, limit: int, offset: int
    ) -> Tuple[List[PromptVersion], int]: ...

    async def set_tag(self, version_id: str, tag_name: Optional[str]) -> None: ...

    async def set_pinned(self, version_id: str, is_pinned: bool) -> None: ...

    async def create_version(
        self,
        prompt_row_id: str,
        commit_message: Optional[str],
        commit_type: str,
        tag_name: Optional[str],
    ) -> CommitResult: ...

    async def rollback_to_version(
        self, prompt_row_id: str, version_id: str, create_backup: bool
    ) -> RollbackResult: ...

    async def cleanup_old_versions(self, max_age_days: int, min_versions: int) -> CleanupResult: ...


def _as_id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


class SqlVersionStore:
    """VersionStore backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession, user_id: Optional[str] = None):
        """Initialize the store.

        Args:
            session: Open database session, committed by its owner
            user_id: Authenticated caller, forwarded to the stored procedures
        """
        self.session = session
        self.user_id = user_id
        self._claims_bound = False

    async def _bind_user(self) -> None:
        """Expose the caller to ``auth.uid()`` inside the stored procedures."""
        if self._claims_bound or not self.user_id:
            return
        if self.session.get_bind().dialect.name != "postgresql":
            return
        claims = json.dumps({"sub": self.user_id, "role": "authenticated"})
        await self.session.execute(
            text("SELECT set_config('request.jwt.claims', :claims, true)"),
            {"claims": claims},
        )
        self._claims_bound = True

    async def _call(self, procedure: str, statement: str, params: Dict[str, Any]):
        await self._bind_user()
        logger.debug("Calling stored procedure", procedure=procedure, params=params)
        try:
            return await self.session.execute(text(statement), params)
        except DBAPIError as e:
            error = classify_collaborator_error(e.orig if e.orig is not None else e)
            logger.warning(
                "Stored procedure failed",
                procedure=procedure,
                error=error.message,
                error_code=error.error_code,
            )
            raise error from e

    async def fetch_version_snapshot(self, version_id: str) -> Snapshot:
        result = await self.session.execute(
            select(PromptVersion.snapshot).where(PromptVersion.row_id == version_id)
        )
        snapshot = result.scalar_one_or_none()
        if snapshot is None:
            raise NotFoundError(f"Version not found: {version_id}", resource="version")
        return snapshot

    async def fetch_latest_snapshot(self, prompt_row_id: str) -> Optional[Snapshot]:
        result = await self.session.execute(
            select(PromptVersion.snapshot)
            .where(PromptVersion.prompt_row_id == prompt_row_id)
            .order_by(PromptVersion.version_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def fetch_live_record(self, prompt_row_id: str) -> Snapshot:
        result = await self.session.execute(select(Prompt).where(Prompt.row_id == prompt_row_id))
        prompt = result.scalar_one_or_none()
        if prompt is None:
            raise NotFoundError(f"Prompt not found: {prompt_row_id}", resource="prompt")
        return prompt.snapshot()

    async def get_version(self, version_id: str) -> PromptVersion:
        result = await self.session.execute(select(PromptVersion).where(PromptVersion.row_id == version_id))
        version = result.scalar_one_or_none()
        if version is None:
            raise NotFoundError(f"Version not found: {version_id}", resource="version")
        return version

    async def list_versions(
        self, prompt_row_id: str, limit: int, offset: int
    ) -> Tuple[List[PromptVersion], int]:
        """Page of versions, newest first, plus the total count."""
        result = await self.session.execute(
            select(PromptVersion)
            .where(PromptVersion.prompt_row_id == prompt_row_id)
            .order_by(PromptVersion.version_number.desc())
            .offset(offset)
            .limit(limit)
        )
        versions = list(result.scalars().all())

        count_result = await self.session.execute(
            select(func.count())
            .select_from(PromptVersion)
            .where(PromptVersion.prompt_row_id == prompt_row_id)
        )
        return versions, count_result.scalar_one()

    async def _update_version(self, version_id: str, **values: Any) -> None:
        try:
            result = await self.session.execute(
                update(PromptVersion).where(PromptVersion.row_id == version_id).values(**values)
            )
        except IntegrityError as e:
            raise ConflictError(
                f'Tag "{values.get("tag_name")}" already exists for this prompt',
                resource="version",
            ) from e
        if result.rowcount == 0:
            raise NotFoundError(f"Version not found: {version_id}", resource="version")

    async def set_tag(self, version_id: str, tag_name: Optional[str]) -> None:
        await self._update_version(version_id, tag_name=tag_name)

    async def set_pinned(self, version_id: str, is_pinned: bool) -> None:
        await self._update_version(version_id, is_pinned=is_pinned)

    async def create_version(
        self,
        prompt_row_id: str,
        commit_message: Optional[str],
        commit_type: str = CommitType.MANUAL.value,
        tag_name: Optional[str] = None,
    ) -> CommitResult:
        result = await self._call(
            "create_prompt_version",
            "SELECT * FROM create_prompt_version("
            "CAST(:p_prompt_row_id AS uuid), :p_commit_message, :p_commit_type, :p_tag_name)",
            {
                "p_prompt_row_id": prompt_row_id,
                "p_commit_message": commit_message,
                "p_commit_type": commit_type,
                "p_tag_name": tag_name,
            },
        )
        row = result.mappings().first() or {}
        return CommitResult(
            version_id=_as_id(row.get("version_id")),
            version_number=row.get("version_number"),
        )

    async def rollback_to_version(
        self, prompt_row_id: str, version_id: str, create_backup: bool = True
    ) -> RollbackResult:
        result = await self._call(
            "rollback_prompt_version",
            "SELECT * FROM rollback_prompt_version("
            "CAST(:p_prompt_row_id AS uuid), CAST(:p_target_version_id AS uuid), :p_create_backup)",
            {
                "p_prompt_row_id": prompt_row_id,
                "p_target_version_id": version_id,
                "p_create_backup": create_backup,
            },
        )
        row = result.mappings().first() or {}
        return RollbackResult(
            backup_version_id=_as_id(row.get("backup_version_id")),
            restored_version_number=row.get("restored_version_number"),
        )

    async def cleanup_old_versions(self, max_age_days: int, min_versions: int) -> CleanupResult:
        result = await self._call(
            "cleanup_old_prompt_versions",
            "SELECT cleanup_old_prompt_versions(:p_max_age_days, :p_min_versions_to_keep)",
            {
                "p_max_age_days": max_age_days,
                "p_min_versions_to_keep": min_versions,
            },
        )
        return CleanupResult(deleted_count=result.scalar() or 0)
