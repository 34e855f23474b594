"""Diff result models.

These are produced per request and never persisted. Optional sides are
omitted from the wire payload when they were never set, so serialize with
``to_wire()`` (``by_alias`` + ``exclude_unset``).
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class LineOpType(str, Enum):
    """Line diff operation kinds."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


class ChangeType(str, Enum):
    """Change kinds shared by path changes and field entries."""
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class WireModel(BaseModel):
    """Base for models serialized with their camelCase aliases."""

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        use_enum_values = True

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class LineNumber(WireModel):
    """1-based line numbers of a line op on each side it exists on."""
    old: Optional[int] = None
    new: Optional[int] = None


class LineOp(WireModel):
    """One line of a text diff."""
    type: LineOpType
    content: str
    line_number: LineNumber = Field(alias="lineNumber")


class PathChange(WireModel):
    """One change inside a structured value, addressed by dotted path."""
    path: str
    type: ChangeType
    old_value: Any = Field(default=None, alias="oldValue")
    new_value: Any = Field(default=None, alias="newValue")


class ChangeEntry(WireModel):
    """The change of one snapshot field.

    Exactly one payload is set: ``text_diff`` for textual fields,
    ``deep_diff`` for structured fields, otherwise the raw old/new values.
    """
    field: str
    type: ChangeType
    text_diff: Optional[List[LineOp]] = Field(default=None, alias="textDiff")
    deep_diff: Optional[List[PathChange]] = Field(default=None, alias="deepDiff")
    old_value: Any = Field(default=None, alias="oldValue")
    new_value: Any = Field(default=None, alias="newValue")


class DiffResult(WireModel):
    """Result of the ``diff`` action."""
    changes: List[ChangeEntry] = Field(default_factory=list)
