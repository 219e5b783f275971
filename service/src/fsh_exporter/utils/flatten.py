"""Flattening of nested FHIR JSON into leaf path/value pairs.

Paths use FSH notation: object keys are joined by ``.`` and array entries are
addressed as ``prop[n]``. Primitive extensions (``_short``, ``_given``) are
written on the primitive they extend (``short.extension[0]``,
``given[1].extension[0]``). Document order is preserved, which the value
resolver relies on when it looks at neighbouring entries.
"""

from __future__ import annotations

from typing import Any

from .json_values import JsonValue

FlatEntry = tuple[str, JsonValue]


def get_path_value_pairs(node: dict[str, Any]) -> dict[str, JsonValue]:
    pairs: dict[str, JsonValue] = {}
    for key, value in node.items():
        _collect(value, _segment(key), pairs)
    return pairs


def flatten(node: dict[str, Any]) -> list[FlatEntry]:
    return list(get_path_value_pairs(node).items())


def _collect(value: JsonValue, current_path: str, pairs: dict[str, JsonValue]) -> None:
    if value is None:
        return
    if isinstance(value, dict):
        for key, child in value.items():
            _collect(child, f"{current_path}.{_segment(key)}", pairs)
    elif isinstance(value, list):
        for index, child in enumerate(value):
            _collect(child, f"{current_path}[{index}]", pairs)
    else:
        pairs[current_path] = value


def _segment(key: str) -> str:
    return key[1:] if key.startswith("_") and len(key) > 1 else key
