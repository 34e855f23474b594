"""Recursive diff for structured (JSON) prompt configuration fields."""

from typing import Any, List

from ..models.diff import ChangeType, PathChange
from .values import MAPPING, ordered_union, value_kind, values_equal


def compute_deep_diff(old_val: Any, new_val: Any, path: str = "") -> List[PathChange]:
    """Diff two JSON-like values, descending into mappings only.

    Sequences are compared as whole values: a changed list yields a single
    ``modified`` change carrying both lists.

    Args:
        old_val: Base value
        new_val: Target value
        path: Dotted path of the values, empty at the top level

    Returns:
        Ordered path changes
    """
    if values_equal(old_val, new_val):
        return []

    here = path or "root"
    if old_val is None:
        return [PathChange(path=here, type=ChangeType.ADDED, new_value=new_val)]
    if new_val is None:
        return [PathChange(path=here, type=ChangeType.REMOVED, old_value=old_val)]

    kind = value_kind(old_val)
    if kind != value_kind(new_val) or kind != MAPPING:
        # scalars and sequences are reported whole
        return [PathChange(path=here, type=ChangeType.MODIFIED, old_value=old_val, new_value=new_val)]

    changes: List[PathChange] = []
    for key in ordered_union(old_val, new_val):
        child_path = f"{path}.{key}" if path else str(key)
        if key not in old_val:
            changes.append(PathChange(path=child_path, type=ChangeType.ADDED, new_value=new_val[key]))
        elif key not in new_val:
            changes.append(PathChange(path=child_path, type=ChangeType.REMOVED, old_value=old_val[key]))
        else:
            changes.extend(compute_deep_diff(old_val[key], new_val[key], child_path))
    return changes
