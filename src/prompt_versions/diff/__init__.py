"""Diff engines for prompt snapshots."""

from .fields import DiffStrategy, classify_field
from .line_diff import compute_line_diff
from .structural_diff import compute_deep_diff
from .values import ordered_union, values_equal

__all__ = [
    "DiffStrategy",
    "classify_field",
    "compute_line_diff",
    "compute_deep_diff",
    "ordered_union",
    "values_equal",
]
