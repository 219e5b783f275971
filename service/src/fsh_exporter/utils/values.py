"""FSH literals and the default value resolver.

The resolver turns one flattened leaf into the literal that is written on the
right-hand side of a rule. Codes are recognised by property name; the code of
a ``Coding`` picks up the ``system`` of the same coding, which is why the
resolver receives the whole entry list and not just the leaf.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from .flatten import FlatEntry
from .paths import leaf_name, parent_path

if TYPE_CHECKING:  # pragma: no cover - only used for type checking
    from ..fisher import Fishable

COMMON_CODE_PROPERTIES = {"language", "status", "use"}

CODE_PROPERTIES_BY_KIND = {
    "StructureDefinition": {"derivation", "fhirVersion", "kind"},
    "ElementDefinition": {
        "aggregation",
        "representation",
        "rules",
        "severity",
        "strength",
        "versioning",
    },
    "CodeSystem": {"content", "hierarchyMeaning"},
}

# (parent property, leaf) pairs whose value is a code only in that position
CONTEXTUAL_CODE_PROPERTIES = {
    ("context", "type"),
    ("discriminator", "type"),
    ("filter", "op"),
    ("telecom", "system"),
    ("telecom", "use"),
    ("property", "type"),
}

PLAIN_CODE = re.compile(r"^[^\s\"#]+$")


@dataclass(frozen=True)
class FshCode:
    code: str
    system: str | None = None
    display: str | None = None

    def __str__(self) -> str:
        code = self.code if PLAIN_CODE.match(self.code or "") else quote_string(self.code)
        rendered = f"{self.system or ''}#{code}"
        if self.display:
            rendered += f" {quote_string(self.display)}"
        return rendered


FshValue = Union[str, bool, int, float, FshCode, None]


def quote_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_value(value: FshValue, *, raw: bool = False) -> str:
    """Render a literal; ``raw`` writes strings unquoted (instance names)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, FshCode):
        return str(value)
    if value is None:
        return ""
    return value if raw else quote_string(value)


def is_fsh_value_empty(value: FshValue) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return len(value) == 0
    if isinstance(value, FshCode):
        return not value.code
    return False


def resolve_value(
    index: int,
    entries: list[FlatEntry],
    resource_kind: str,
    fisher: Fishable | None = None,
) -> FshValue:
    key, value = entries[index]
    if isinstance(value, (bool, int, float)):
        return value
    if not isinstance(value, str):
        return None

    leaf = leaf_name(key)
    parent = parent_path(key)
    parent_leaf = leaf_name(parent) if parent else None

    if leaf == "code" and parent is not None and parent_leaf != "telecom":
        system = _sibling_value(entries, f"{parent}.system")
        if system is not None:
            return FshCode(value, system)

    if (parent_leaf, leaf) in CONTEXTUAL_CODE_PROPERTIES:
        return FshCode(value)
    if leaf in COMMON_CODE_PROPERTIES or leaf in CODE_PROPERTIES_BY_KIND.get(resource_kind, set()):
        return FshCode(value)
    return value


def _sibling_value(entries: list[FlatEntry], path: str):
    for key, value in entries:
        if key == path:
            return value
    return None
