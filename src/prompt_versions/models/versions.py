"""Version and prompt persistence models."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

from ..core.database import Base
from ..diff.fields import VERSIONABLE_FIELDS

JsonType = JSON().with_variant(JSONB(), "postgresql")
FieldListType = JSON().with_variant(ARRAY(Text()), "postgresql")
IdType = Uuid(as_uuid=False)

_JSON_COLUMNS = {
    "post_action_config",
    "question_config",
    "variable_assignments_config",
    "extracted_variables",
    "system_variables",
}
_BOOLEAN_COLUMNS = {
    "auto_run_children",
    "exclude_from_cascade",
    "exclude_from_export",
    "confluence_enabled",
    "is_legacy",
    "stream",
    "echo",
    "starred",
    "is_private",
    "is_assistant",
}
_ID_COLUMNS = {
    "template_row_id",
    "library_prompt_id",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class CommitType(str, Enum):
    """How a version came to exist."""
    MANUAL = "manual"
    AUTO = "auto"
    ROLLBACK = "rollback"
    IMPORT = "import"


def _versionable_column(name: str) -> Column:
    if name in _JSON_COLUMNS:
        return Column(name, JsonType, nullable=True)
    if name in _ID_COLUMNS:
        return Column(name, IdType, nullable=True)
    if name.endswith("_on") or name in _BOOLEAN_COLUMNS:
        return Column(name, Boolean, nullable=True)
    return Column(name, Text, nullable=True)


class Prompt(Base):
    """Live prompt record. Only the versionable columns are mapped."""

    __table__ = Table(
        "q_prompts",
        Base.metadata,
        Column("row_id", IdType, primary_key=True, default=_new_id),
        *[_versionable_column(name) for name in VERSIONABLE_FIELDS],
        Column("owner_id", IdType, nullable=True),
        Column("is_deleted", Boolean, default=False, nullable=False),
        Column("current_version", Integer, default=0),
        Column("has_uncommitted_changes", Boolean, default=False),
        Column("last_committed_at", DateTime(timezone=True), nullable=True),
        Column("updated_at", DateTime(timezone=True), default=_utcnow, onupdate=_utcnow),
    )

    def snapshot(self) -> Dict[str, Any]:
        """Current state of the versionable fields."""
        return {name: getattr(self, name) for name in VERSIONABLE_FIELDS}

    def __repr__(self):
        return f"<Prompt(row_id={self.row_id}, name={self.prompt_name})>"


class PromptVersion(Base):
    """A committed snapshot of a prompt."""

    __tablename__ = "q_prompt_versions"
    __table_args__ = (
        UniqueConstraint("prompt_row_id", "version_number", name="unique_prompt_version"),
        Index(
            "idx_unique_prompt_tag",
            "prompt_row_id",
            "tag_name",
            unique=True,
            postgresql_where=text("tag_name IS NOT NULL"),
            sqlite_where=text("tag_name IS NOT NULL"),
        ),
    )

    row_id = Column(IdType, primary_key=True, default=_new_id)
    prompt_row_id = Column(IdType, ForeignKey("q_prompts.row_id", ondelete="CASCADE"), nullable=False, index=True)

    version_number = Column(Integer, nullable=False)
    commit_message = Column(Text, nullable=True)
    commit_type = Column(String(20), default=CommitType.MANUAL.value)

    snapshot = Column(JsonType, nullable=False)
    snapshot_schema_version = Column(Integer, default=1)

    fields_changed = Column(FieldListType, default=list)
    parent_version_id = Column(IdType, ForeignKey("q_prompt_versions.row_id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    created_by = Column(IdType, nullable=True)

    tag_name = Column(Text, nullable=True)
    is_pinned = Column(Boolean, default=False)

    def __repr__(self):
        return f"<PromptVersion(prompt={self.prompt_row_id}, v={self.version_number})>"


class VersionSummary(BaseModel):
    """Row of the ``history`` listing."""
    row_id: str
    version_number: int
    commit_message: Optional[str] = None
    commit_type: Optional[str] = None
    fields_changed: Optional[List[str]] = None
    tag_name: Optional[str] = None
    is_pinned: bool = False
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class VersionHistory(BaseModel):
    """Result of the ``history`` action."""
    versions: List[VersionSummary] = Field(default_factory=list)
    total: int = 0


class VersionMetadata(BaseModel):
    """Metadata returned alongside a previewed snapshot."""
    version_number: int
    commit_message: Optional[str] = None
    created_at: Optional[datetime] = None
    tag_name: Optional[str] = None
    is_pinned: bool = False

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class VersionPreview(BaseModel):
    """Result of the ``preview`` action."""
    snapshot: Dict[str, Any]
    metadata: VersionMetadata


class CommitResult(BaseModel):
    """Result of ``create_prompt_version``."""
    version_id: Optional[str] = None
    version_number: Optional[int] = None


class RollbackResult(BaseModel):
    """Result of ``rollback_prompt_version``."""
    backup_version_id: Optional[str] = None
    restored_version_number: Optional[int] = None


class CleanupResult(BaseModel):
    """Result of ``cleanup_old_prompt_versions``."""
    deleted_count: int = 0
