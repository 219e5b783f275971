"""Structural comparison of JSON-like values.

Every diff in the exporter goes through :func:`deep_equal` so that arrays and
objects are compared by content. Booleans never compare equal to numbers,
unlike plain ``==`` in Python.
"""

from __future__ import annotations

from typing import Any, Iterable

JsonValue = Any


def deep_equal(left: JsonValue, right: JsonValue) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right

    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(deep_equal(left[key], right[key]) for key in left)

    if isinstance(left, list) and isinstance(right, list):
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))

    if isinstance(left, (dict, list)) or isinstance(right, (dict, list)):
        return False

    return left == right


def difference(items: Iterable[JsonValue], others: Iterable[JsonValue]) -> list[JsonValue]:
    """Return the entries of ``items`` that have no structural match in ``others``."""
    others = list(others)
    return [item for item in items if not any(deep_equal(item, other) for other in others)]


def is_subset(items: Iterable[JsonValue], others: Iterable[JsonValue]) -> bool:
    return not difference(items, others)
