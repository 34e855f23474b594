"""LCS-based line diff for free-text prompt fields."""

import json
from typing import Any, List, Tuple

from ..models.diff import LineNumber, LineOp, LineOpType


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), default=str)


def _lcs_table(old_lines: List[str], new_lines: List[str]) -> List[List[int]]:
    m, n = len(old_lines), len(new_lines)
    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        old_line = old_lines[i - 1]
        row, prev = dp[i], dp[i - 1]
        for j in range(1, n + 1):
            if old_line == new_lines[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])
    return dp


def _matched_pairs(old_lines: List[str], new_lines: List[str]) -> List[Tuple[int, int]]:
    """Backtrack the LCS table into (old_index, new_index) pairs.

    On a tie the walk steps back through the old text first.
    """
    dp = _lcs_table(old_lines, new_lines)
    matches: List[Tuple[int, int]] = []
    i, j = len(old_lines), len(new_lines)
    while i > 0 and j > 0:
        if old_lines[i - 1] == new_lines[j - 1]:
            matches.append((i - 1, j - 1))
            i -= 1
            j -= 1
        elif dp[i - 1][j] >= dp[i][j - 1]:
            i -= 1
        else:
            j -= 1
    matches.reverse()
    return matches


def compute_line_diff(old_text: Any, new_text: Any) -> List[LineOp]:
    """Diff two texts line by line.

    Absent text counts as the empty string. Between two matched lines every
    skipped old line is reported as removed before the skipped new lines are
    reported as added.

    Args:
        old_text: Base text, or None
        new_text: Target text, or None

    Returns:
        Ordered line operations
    """
    old_value, new_value = _as_text(old_text), _as_text(new_text)
    if not old_value and not new_value:
        return []

    old_lines = old_value.split("\n")
    new_lines = new_value.split("\n")
    result: List[LineOp] = []
    old_idx = new_idx = 0
    old_line_num = new_line_num = 1

    def flush_until(old_stop: int, new_stop: int) -> None:
        nonlocal old_idx, new_idx, old_line_num, new_line_num
        while old_idx < old_stop:
            result.append(LineOp(
                type=LineOpType.REMOVED,
                content=old_lines[old_idx],
                line_number=LineNumber(old=old_line_num),
            ))
            old_idx += 1
            old_line_num += 1
        while new_idx < new_stop:
            result.append(LineOp(
                type=LineOpType.ADDED,
                content=new_lines[new_idx],
                line_number=LineNumber(new=new_line_num),
            ))
            new_idx += 1
            new_line_num += 1

    for old_match, new_match in _matched_pairs(old_lines, new_lines):
        flush_until(old_match, new_match)
        result.append(LineOp(
            type=LineOpType.UNCHANGED,
            content=old_lines[old_idx],
            line_number=LineNumber(old=old_line_num, new=new_line_num),
        ))
        old_idx += 1
        new_idx += 1
        old_line_num += 1
        new_line_num += 1

    flush_until(len(old_lines), len(new_lines))
    return result
