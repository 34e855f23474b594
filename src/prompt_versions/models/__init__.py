"""Models for the prompt versions service."""

from .diff import ChangeEntry, ChangeType, DiffResult, LineOp, LineOpType, PathChange
from .requests import (
    CleanupRequest,
    CommitRequest,
    DiffRequest,
    HistoryRequest,
    PinRequest,
    PreviewRequest,
    RollbackRequest,
    TagRequest,
    VersionRequest,
    parse_request,
)

__all__ = [
    "ChangeEntry",
    "ChangeType",
    "DiffResult",
    "LineOp",
    "LineOpType",
    "PathChange",
    "CleanupRequest",
    "CommitRequest",
    "DiffRequest",
    "HistoryRequest",
    "PinRequest",
    "PreviewRequest",
    "RollbackRequest",
    "TagRequest",
    "VersionRequest",
    "parse_request",
]
