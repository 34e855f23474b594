"""Helpers for untyped JSON-like values flowing through the diff engines."""

import json
from typing import Any


NULL = "null"
BOOLEAN = "boolean"
NUMBER = "number"
STRING = "string"
SEQUENCE = "sequence"
MAPPING = "mapping"


def value_kind(value: Any) -> str:
    """Return the closed kind tag of a JSON-like value."""
    if value is None:
        return NULL
    # bool is a subclass of int; check it first
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, dict):
        return MAPPING
    if isinstance(value, (list, tuple)):
        return SEQUENCE
    return STRING


def values_equal(left: Any, right: Any) -> bool:
    """Structural equality over JSON-like values.

    Booleans never equal numbers, ints and floats compare numerically,
    mapping key order is ignored and sequence order is significant.
    """
    kind = value_kind(left)
    if kind != value_kind(right):
        return False
    if kind == MAPPING:
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)
    if kind == SEQUENCE:
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))
    return left == right


def ordered_union(left: Any, right: Any) -> list:
    """Keys of ``left`` in order, followed by keys only found in ``right``."""
    return list(dict.fromkeys([*(left or {}), *(right or {})]))


def serialized_size(value: Any) -> int:
    """Length of a value as it would travel over the wire."""
    if value is None:
        return 0
    if isinstance(value, str):
        return len(value)
    return len(json.dumps(value, default=str))
