"""Snapshot resolution and per-field diffing."""

import time
from typing import Any, Dict, List, Optional

import structlog

from ..core.config import settings
from ..core.exceptions import RequestTimeoutError, ValidationError
from ..core.logging import log_diff_computed
from ..diff.fields import DiffStrategy, classify_field
from ..diff.line_diff import compute_line_diff
from ..diff.structural_diff import compute_deep_diff
from ..diff.values import ordered_union, serialized_size, values_equal
from ..models.diff import ChangeEntry, ChangeType, DiffResult
from ..models.requests import DiffRequest
from .version_store import Snapshot, VersionStore

logger = structlog.get_logger(__name__)

_MISSING = object()


def _change_type(old: Any, new: Any) -> ChangeType:
    if old is _MISSING:
        return ChangeType.ADDED
    if new is _MISSING:
        return ChangeType.REMOVED
    return ChangeType.MODIFIED


def _present(value: Any) -> Any:
    return None if value is _MISSING else value


def diff_snapshots(
    base: Snapshot,
    target: Snapshot,
    deadline: Optional[float] = None,
    max_field_chars: Optional[int] = None,
) -> List[ChangeEntry]:
    """Compare two snapshots field by field.

    Fields are visited in base order, then target-only fields. Equal fields
    produce nothing.

    Args:
        base: Older snapshot
        target: Newer snapshot
        deadline: ``time.monotonic()`` value after which no further field is started
        max_field_chars: Largest text or structured value that may be diffed

    Returns:
        Change entries in field order

    Raises:
        RequestTimeoutError: When the deadline passes between fields
        ValidationError: When a field exceeds ``max_field_chars``
    """
    base = base or {}
    target = target or {}

    pending = []
    for field in ordered_union(base, target):
        old = base.get(field, _MISSING)
        new = target.get(field, _MISSING)
        if values_equal(_present(old), _present(new)) and (old is _MISSING) == (new is _MISSING):
            continue
        pending.append((field, old, new, classify_field(field)))

    # every field is sized before any of them is diffed
    if max_field_chars is not None:
        for field, old, new, strategy in pending:
            if strategy is DiffStrategy.SCALAR:
                continue
            size = max(serialized_size(_present(old)), serialized_size(_present(new)))
            if size > max_field_chars:
                raise ValidationError(
                    f"{field}: too large to diff ({size} chars, max {max_field_chars})",
                    field=field,
                )

    changes: List[ChangeEntry] = []
    for field, old, new, strategy in pending:
        if deadline is not None and time.monotonic() > deadline:
            raise RequestTimeoutError()

        change_type = _change_type(old, new)
        if strategy is DiffStrategy.TEXT:
            changes.append(ChangeEntry(
                field=field,
                type=change_type,
                text_diff=compute_line_diff(_present(old), _present(new)),
            ))
        elif strategy is DiffStrategy.STRUCTURED:
            changes.append(ChangeEntry(
                field=field,
                type=change_type,
                deep_diff=compute_deep_diff(_present(old), _present(new)),
            ))
        else:
            values: Dict[str, Any] = {}
            if old is not _MISSING:
                values["old_value"] = old
            if new is not _MISSING:
                values["new_value"] = new
            changes.append(ChangeEntry(field=field, type=change_type, **values))

    return changes


class DiffOrchestrator:
    """Resolves the two snapshots of a diff request and compares them."""

    def __init__(self, store: VersionStore, max_field_chars: Optional[int] = None):
        self.store = store
        self.max_field_chars = max_field_chars if max_field_chars is not None else settings.max_diff_field_chars

    async def resolve_base(self, prompt_row_id: str, version_id: Optional[str] = None) -> Snapshot:
        """Explicit version, else the latest committed version, else empty."""
        if version_id:
            return await self.store.fetch_version_snapshot(version_id)
        latest = await self.store.fetch_latest_snapshot(prompt_row_id)
        return latest or {}

    async def resolve_target(self, prompt_row_id: str, version_id: Optional[str] = None) -> Snapshot:
        """Explicit version, else the live prompt record."""
        if version_id:
            return await self.store.fetch_version_snapshot(version_id)
        return await self.store.fetch_live_record(prompt_row_id)

    async def diff(self, request: DiffRequest, deadline: Optional[float] = None) -> DiffResult:
        base = await self.resolve_base(request.prompt_row_id, request.version_b)
        target = await self.resolve_target(request.prompt_row_id, request.version_a)

        start_time = time.monotonic()
        changes = diff_snapshots(base, target, deadline=deadline, max_field_chars=self.max_field_chars)

        log_diff_computed(
            logger,
            prompt_row_id=request.prompt_row_id,
            fields_compared=len(ordered_union(base, target)),
            fields_changed=len(changes),
            duration_ms=round((time.monotonic() - start_time) * 1000, 2),
            base_version=request.version_b or "latest",
            target_version=request.version_a or "live",
        )
        return DiffResult(changes=changes)
