"""Shared fixtures for prompt versions tests.

Provides an in-memory ``VersionStore`` so services and the HTTP surface can
be exercised without a database or the stored procedures.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import pytest

from prompt_versions.core.exceptions import NotFoundError
from prompt_versions.models.versions import CleanupResult, CommitResult, PromptVersion, RollbackResult

_TS = datetime(2026, 1, 20, 12, 0, 0, tzinfo=timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class FakeVersionStore:
    """Dict-backed stand-in for ``SqlVersionStore`` that records its calls."""

    def __init__(self) -> None:
        self.prompts: dict[str, dict[str, Any]] = {}
        self.versions: dict[str, PromptVersion] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.fail_with: Exception | None = None

    # -- setup helpers ------------------------------------------------------

    def add_prompt(self, snapshot: dict[str, Any], prompt_row_id: str | None = None) -> str:
        prompt_row_id = prompt_row_id or new_id()
        self.prompts[prompt_row_id] = dict(snapshot)
        return prompt_row_id

    def add_version(
        self,
        prompt_row_id: str,
        snapshot: dict[str, Any],
        commit_message: str | None = None,
        tag_name: str | None = None,
        is_pinned: bool = False,
    ) -> PromptVersion:
        number = 1 + max(
            (v.version_number for v in self.versions.values() if v.prompt_row_id == prompt_row_id),
            default=0,
        )
        version = PromptVersion(
            row_id=new_id(),
            prompt_row_id=prompt_row_id,
            version_number=number,
            commit_message=commit_message,
            commit_type="manual",
            snapshot=dict(snapshot),
            fields_changed=sorted(snapshot),
            tag_name=tag_name,
            is_pinned=is_pinned,
            created_at=_TS,
            created_by=None,
        )
        self.versions[version.row_id] = version
        return version

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_with is not None:
            raise self.fail_with

    # -- VersionStore -------------------------------------------------------

    async def fetch_version_snapshot(self, version_id: str) -> dict[str, Any]:
        self._record("fetch_version_snapshot", version_id)
        if version_id not in self.versions:
            raise NotFoundError(f"Version not found: {version_id}", resource="version")
        return self.versions[version_id].snapshot

    async def fetch_latest_snapshot(self, prompt_row_id: str) -> dict[str, Any] | None:
        self._record("fetch_latest_snapshot", prompt_row_id)
        candidates = [v for v in self.versions.values() if v.prompt_row_id == prompt_row_id]
        if not candidates:
            return None
        return max(candidates, key=lambda v: v.version_number).snapshot

    async def fetch_live_record(self, prompt_row_id: str) -> dict[str, Any]:
        self._record("fetch_live_record", prompt_row_id)
        if prompt_row_id not in self.prompts:
            raise NotFoundError(f"Prompt not found: {prompt_row_id}", resource="prompt")
        return self.prompts[prompt_row_id]

    async def get_version(self, version_id: str) -> PromptVersion:
        self._record("get_version", version_id)
        if version_id not in self.versions:
            raise NotFoundError(f"Version not found: {version_id}", resource="version")
        return self.versions[version_id]

    async def list_versions(self, prompt_row_id: str, limit: int, offset: int):
        self._record("list_versions", prompt_row_id, limit, offset)
        matching = sorted(
            (v for v in self.versions.values() if v.prompt_row_id == prompt_row_id),
            key=lambda v: v.version_number,
            reverse=True,
        )
        return matching[offset:offset + limit], len(matching)

    async def set_tag(self, version_id: str, tag_name: str | None) -> None:
        self._record("set_tag", version_id, tag_name)
        (await self.get_version(version_id)).tag_name = tag_name

    async def set_pinned(self, version_id: str, is_pinned: bool) -> None:
        self._record("set_pinned", version_id, is_pinned)
        (await self.get_version(version_id)).is_pinned = is_pinned

    async def create_version(self, prompt_row_id, commit_message, commit_type, tag_name) -> CommitResult:
        self._record("create_version", prompt_row_id, commit_message, commit_type, tag_name)
        version = self.add_version(prompt_row_id, self.prompts[prompt_row_id], commit_message, tag_name)
        return CommitResult(version_id=version.row_id, version_number=version.version_number)

    async def rollback_to_version(self, prompt_row_id, version_id, create_backup) -> RollbackResult:
        self._record("rollback_to_version", prompt_row_id, version_id, create_backup)
        target = self.versions[version_id]
        backup_id = None
        if create_backup:
            backup_id = self.add_version(prompt_row_id, self.prompts[prompt_row_id]).row_id
        self.prompts[prompt_row_id] = dict(target.snapshot)
        return RollbackResult(backup_version_id=backup_id, restored_version_number=target.version_number)

    async def cleanup_old_versions(self, max_age_days: int, min_versions: int) -> CleanupResult:
        self._record("cleanup_old_versions", max_age_days, min_versions)
        return CleanupResult(deleted_count=3)


@pytest.fixture
def store() -> FakeVersionStore:
    return FakeVersionStore()


@pytest.fixture
def prompt_snapshot() -> dict[str, Any]:
    return {
        "prompt_name": "Summarise ticket",
        "input_admin_prompt": "You are a support agent.\nBe concise.",
        "input_user_prompt": "Summarise: {{ticket}}",
        "note": None,
        "model": "gpt-4o",
        "temperature": "0.2",
        "temperature_on": True,
        "post_action_config": {"target": "slack", "options": {"channel": "#support"}},
        "extracted_variables": ["ticket"],
    }
