"""Structural copy and comparison of field values."""

import copy
from typing import Any


def deep_copy(value: Any) -> Any:
    """Return a structural clone of a field value or mapping of values."""
    return copy.deepcopy(value)


def deep_equal(left: Any, right: Any) -> bool:
    """Compare two field values structurally.

    Mappings compare by key set and per-key value, sequences element-wise,
    and everything else with ``==``.
    """
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(deep_equal(left[key], right[key]) for key in left)

    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))

    return bool(left == right)


def project(values: dict[str, Any], keys: list[str]) -> dict[str, Any]:
    """Pick ``keys`` out of ``values`` in the given order, skipping absent ones."""
    return {key: values[key] for key in keys if key in values}
