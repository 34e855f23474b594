"""Request models for the prompt versions endpoint.

Each action is its own model; ``VersionRequest`` is the closed union of them,
discriminated by ``action``. Typed callers build the variant directly, while
raw JSON bodies go through ``parse_request``.
"""

import re
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, validator
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import ValidationError

TAG_NAME_PATTERN = re.compile(r"[A-Za-z0-9_\-.]{1,50}")
TAG_NAME_MESSAGE = "tag_name: alphanumeric, max 50 chars"

VALID_ACTIONS = ("commit", "rollback", "history", "diff", "tag", "pin", "preview", "cleanup")


def _check_tag_name(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if not TAG_NAME_PATTERN.fullmatch(value):
        raise ValueError(TAG_NAME_MESSAGE)
    return value


class CommitRequest(BaseModel):
    """Persist the live prompt state as a new version."""
    action: Literal["commit"] = "commit"
    prompt_row_id: str = Field(..., min_length=1)
    commit_message: Optional[str] = Field(default=None, max_length=500)
    tag_name: Optional[str] = None

    @validator("tag_name")
    def validate_tag_name(cls, v):
        """Validate tag format."""
        return _check_tag_name(v)


class RollbackRequest(BaseModel):
    """Restore the prompt to a stored version."""
    action: Literal["rollback"] = "rollback"
    prompt_row_id: str = Field(..., min_length=1)
    version_id: str = Field(..., min_length=1)
    create_backup: bool = True


class HistoryRequest(BaseModel):
    """Page through a prompt's versions, newest first."""
    action: Literal["history"] = "history"
    prompt_row_id: str = Field(..., min_length=1)
    limit: Optional[int] = Field(default=None, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class DiffRequest(BaseModel):
    """Compare two snapshots of a prompt.

    ``version_b`` is the base (older) side and ``version_a`` the target
    (newer) side. Either may be omitted, see ``DiffOrchestrator``.
    """
    action: Literal["diff"] = "diff"
    prompt_row_id: str = Field(..., min_length=1)
    version_a: Optional[str] = None
    version_b: Optional[str] = None


class TagRequest(BaseModel):
    """Set or clear the tag of a version."""
    action: Literal["tag"] = "tag"
    version_id: str = Field(..., min_length=1)
    tag_name: Optional[str] = None

    @validator("tag_name")
    def validate_tag_name(cls, v):
        """Validate tag format."""
        return _check_tag_name(v)


class PinRequest(BaseModel):
    """Pin or unpin a version."""
    action: Literal["pin"] = "pin"
    version_id: str = Field(..., min_length=1)
    is_pinned: bool = False


class PreviewRequest(BaseModel):
    """Fetch a stored version's snapshot and metadata."""
    action: Literal["preview"] = "preview"
    version_id: str = Field(..., min_length=1)


class CleanupRequest(BaseModel):
    """Run retention cleanup for old, unpinned, untagged versions.

    Zero or absent values fall back to the configured retention defaults.
    """
    action: Literal["cleanup"] = "cleanup"
    max_age_days: Optional[int] = Field(default=None, ge=0)
    min_versions: Optional[int] = Field(default=None, ge=0)


VersionRequest = Annotated[
    Union[
        CommitRequest,
        RollbackRequest,
        HistoryRequest,
        DiffRequest,
        TagRequest,
        PinRequest,
        PreviewRequest,
        CleanupRequest,
    ],
    Field(discriminator="action"),
]

_request_adapter = TypeAdapter(VersionRequest)


def _describe(error: dict) -> str:
    field = next((str(loc) for loc in reversed(error.get("loc", ())) if isinstance(loc, str)), "")
    if error.get("type") == "missing":
        return f"{field} required"
    # empty identifiers are treated as absent
    if error.get("type") == "string_too_short" and error.get("ctx", {}).get("min_length") == 1:
        return f"{field} required"
    message = str(error.get("msg", "invalid value"))
    # pydantic prefixes errors raised inside validators
    message = message.removeprefix("Value error, ")
    if message == TAG_NAME_MESSAGE:
        return message
    return f"{field}: {message}" if field else message


def parse_request(body: Any) -> VersionRequest:
    """Validate an untyped request body into a request variant.

    Args:
        body: Decoded JSON body

    Returns:
        The request model matching ``body["action"]``

    Raises:
        ValidationError: When the action is unknown or a field is invalid
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    action = body.get("action")
    if action not in VALID_ACTIONS:
        raise ValidationError(f"Invalid action: {action}", field="action")

    try:
        return _request_adapter.validate_python(body)
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise ValidationError(_describe(first), field=str(first.get("loc", ("",))[-1])) from e
