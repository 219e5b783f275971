"""Caret value rules for a single ElementDefinition.

Every leaf of the element that no other extractor has claimed becomes a
``* path ^caretPath = value`` rule. Constraint and mapping indices are
rewritten from differential-relative to snapshot-relative positions, because
SUSHI applies them against the snapshot arrays.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from ..consts import ELEMENT_CLAIMED_PROPERTIES
from ..fisher import Fishable
from ..model.rules import CaretValueRule
from ..utils.flatten import FlatEntry, flatten
from ..utils.json_values import deep_equal
from ..utils.paths import CHOICE_SLICE_MARKER, alternate_choice_id, get_fsh_path
from ..utils.values import FshValue, is_fsh_value_empty, resolve_value

logger = logging.getLogger(__name__)

CONSTRAINT_INDEX = re.compile(r"constraint\[(\d+)\]")
MAPPING_INDEX = re.compile(r"mapping\[(\d+)\]")


@dataclass
class ProcessableElementDefinition:
    """Element JSON plus the leaf paths other extractors already turned into rules."""

    data: dict[str, Any]
    processed_paths: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.data.get("id") or self.data.get("path")

    def claim(self, *paths: str) -> None:
        for path in paths:
            if path not in self.processed_paths:
                self.processed_paths.append(path)


def find_matching_snapshot(differential_id: str, struct_def: dict) -> dict | None:
    for element in (struct_def.get("snapshot") or {}).get("element") or []:
        element_id = element.get("id")
        if element_id == differential_id:
            return element
        # Observation.value[x]:valueQuantity in the snapshot is Observation.valueQuantity in the differential
        if element_id and element_id.find(CHOICE_SLICE_MARKER) > 0:
            if alternate_choice_id(element_id) == differential_id:
                return element
    return None


def has_snapshot(struct_def: dict | None) -> bool:
    return bool(struct_def and ((struct_def.get("snapshot") or {}).get("element")))


def _same_constraint(candidate: dict, differential: dict) -> bool:
    return differential.get("key") is not None and candidate.get("key") == differential.get("key")


class ElementCaretExtractor:
    """Turns the unclaimed leaves of a differential element into caret value rules.

    The flattener, value resolver and emptiness check are injectable.
    """

    def __init__(
        self,
        *,
        flattener: Callable[[dict], list[FlatEntry]] = flatten,
        resolver: Callable[..., FshValue] = resolve_value,
        is_empty: Callable[[FshValue], bool] = is_fsh_value_empty,
        logger: logging.Logger = logger,
    ) -> None:
        self._flatten = flattener
        self._resolve = resolver
        self._is_empty = is_empty
        self._logger = logger

    def process(
        self,
        element: ProcessableElementDefinition,
        struct_def: dict,
        fisher: Fishable | None,
    ) -> list[CaretValueRule]:
        """Extract caret value rules for one differential element.

        Args:
            element: The element JSON plus the paths already turned into rules.
                ``id`` and ``path`` are claimed here.
            struct_def: The StructureDefinition the element belongs to; its
                snapshot is used to rewrite constraint and mapping indices
            fisher: Lookup passed through to the value resolver

        Returns:
            One rule per remaining non-empty leaf, in document order
        """
        element_json = element.data
        struct_def = struct_def or {}
        path = get_fsh_path(element.id)
        element.claim(*ELEMENT_CLAIMED_PROPERTIES)

        remaining = [
            (key, value)
            for key, value in self._flatten(element_json)
            if key not in element.processed_paths
        ]

        rules: list[CaretValueRule] = []
        for index, (key, _) in enumerate(remaining):
            value = self._resolve(index, remaining, "ElementDefinition", fisher)
            if self._is_empty(value):
                self._logger.error(
                    "Value in StructureDefinition %s for element %s.%s is empty. "
                    "No caret value rule will be created.",
                    struct_def.get("name"),
                    path,
                    key,
                )
                continue

            caret_path, comment = key, None
            if constraint_match := CONSTRAINT_INDEX.match(key):
                caret_path, comment = self._reconcile_index(
                    key, constraint_match, "constraint", element_json, struct_def, path, _same_constraint
                )
            elif mapping_match := MAPPING_INDEX.match(key):
                # mappings have no key, so the whole entry has to match
                caret_path, comment = self._reconcile_index(
                    key, mapping_match, "mapping", element_json, struct_def, path, deep_equal
                )

            rules.append(
                CaretValueRule(path=path, caret_path=caret_path, value=value, fsh_comment=comment)
            )
        return rules

    def _reconcile_index(
        self,
        key: str,
        match: re.Match,
        collection: str,
        element_json: dict,
        struct_def: dict,
        path: str,
        matches: Callable[[Any, Any], bool],
    ) -> tuple[str, str | None]:
        snapshot_index = None
        if has_snapshot(struct_def):
            differential_entries = element_json.get(collection) or []
            differential_index = int(match.group(1))
            snapshot_element = find_matching_snapshot(element_json.get("id"), struct_def)
            if snapshot_element is not None and differential_index < len(differential_entries):
                differential_entry = differential_entries[differential_index]
                for candidate_index, candidate in enumerate(snapshot_element.get(collection) or []):
                    if matches(candidate, differential_entry):
                        snapshot_index = candidate_index
                        break

        if snapshot_index is not None:
            return key.replace(match.group(0), f"{collection}[{snapshot_index}]", 1), None

        comment = (
            f"WARNING: The {collection} index in the following rule (e.g., {match.group(0)}) "
            "may be incorrect.\n"
            f"Please compare with the {collection} array in the original definition's snapshot "
            "and adjust as necessary."
        )
        self._logger.warning(
            "Could not calculate correct %s index relative to the snapshot for the following path "
            "in %s: %s ^%s. To resolve this issue, export definitions that include valid snapshots; "
            "otherwise check and fix %s indices in the generated FSH files as necessary.",
            collection,
            struct_def.get("name"),
            path,
            key,
            collection,
        )
        return key, comment
