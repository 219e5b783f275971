"""Caret value rules for whole resources and CodeSystem concepts.

StructureDefinitions are diffed against their parent so that only what SUSHI
would not inherit is written. FSH cannot delete, splice or replace array
entries, so top-level arrays are massaged before the diff:

1. equal to, or a subset of, the parent array: nothing is written
2. ``extension`` / ``modifierExtension`` with new items: the whole array is
   written, since SUSHI rewrites those arrays itself before applying rules
3. any other array with new items: only changed or added leaves are written

ValueSets and CodeSystems have no parent to diff against; their leaves are
filtered through fixed ignore lists instead.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Callable

from ..consts import (
    CONCEPT_IGNORED_PROPERTIES,
    DEFAULT_STATUS,
    EXTENSION_ARRAY_PROPERTIES,
    RESOURCE_IGNORED_PROPERTIES,
    SD_CLEARED_PROPERTIES,
)
from ..data.config import ExportConfig
from ..fisher import PARENT_TYPES, Fishable
from ..model.rules import CaretValueRule
from ..utils.flatten import FlatEntry, flatten
from ..utils.json_values import deep_equal, is_subset
from ..utils.values import FshValue, is_fsh_value_empty, resolve_value

logger = logging.getLogger(__name__)


def is_ignored(key: str, properties: list[str]) -> bool:
    return any(
        key == prop or re.match(rf"{re.escape(prop)}(\[\d+\])?\.", key) for prop in properties
    )


def is_standard_url(resource_type: str, config: ExportConfig, resource: dict) -> bool:
    return resource.get("url") == f"{config.canonical}/{resource_type}/{resource.get('id')}"


class ResourceCaretExtractor:
    """Caret value rules for StructureDefinitions, ValueSets, CodeSystems and concepts."""

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

    def process_structure_definition(
        self, sd_json: dict, fisher: Fishable, config: ExportConfig
    ) -> list[CaretValueRule]:
        """Extract the top-level caret value rules of a profile or extension.

        Args:
            sd_json: The StructureDefinition JSON; it is not modified
            fisher: Lookup used to find the parent named by ``baseDefinition``
            config: Provides the canonical for the standard URL check

        Returns:
            Rules for every leaf SUSHI would not produce from the parent
        """
        sd = copy.deepcopy(sd_json)
        parent = fisher.fish_for_fhir(sd_json.get("baseDefinition"), *PARENT_TYPES)

        if parent is None:
            # keep going: the properties SUSHI clears still have to be written
            self._logger.warning(
                "Cannot reliably export top-level caret rules for %s because no definition "
                "was found for its parent: %s. If its parent is from another IG, "
                "export again declaring that IG as a dependency.",
                sd_json.get("name"),
                sd_json.get("baseDefinition"),
            )
            parent = copy.deepcopy(sd_json)
        else:
            parent = copy.deepcopy(parent)

        for prop in RESOURCE_IGNORED_PROPERTIES["StructureDefinition"]:
            sd.pop(prop, None)
            parent.pop(prop, None)

        if (sd.get("text") or {}).get("status") == "generated":
            sd.pop("text", None)
            parent.pop("text", None)

        for prop in SD_CLEARED_PROPERTIES:
            parent.pop(prop, None)

        self._reconcile_arrays(sd, parent)

        entries = self._flatten(sd)
        flat_parent = dict(self._flatten(parent))
        rules: list[CaretValueRule] = []
        for index, (key, value) in enumerate(entries):
            changed = (
                key not in flat_parent
                or not deep_equal(value, flat_parent[key])
                or (key == "status" and value != DEFAULT_STATUS)
            )
            if not changed:
                continue
            if key == "url" and is_standard_url("StructureDefinition", config, sd_json):
                continue

            rule = self._build_rule(
                index,
                entries,
                "StructureDefinition",
                fisher,
                f"StructureDefinition {sd_json.get('name')}",
            )
            if rule is not None:
                rules.append(rule)
        return rules

    def process_resource(
        self, resource: dict, fisher: Fishable, resource_type: str, config: ExportConfig
    ) -> list[CaretValueRule]:
        """Extract caret value rules for a ValueSet or CodeSystem.

        Args:
            resource: The resource JSON
            fisher: Lookup passed through to the value resolver
            resource_type: ``ValueSet`` or ``CodeSystem``
            config: Provides the canonical for the standard URL check

        Returns:
            Rules for every leaf not covered by a keyword or another rule
        """
        ignored = RESOURCE_IGNORED_PROPERTIES[resource_type]
        entries = [
            (key, value) for key, value in self._flatten(resource) if not is_ignored(key, ignored)
        ]

        rules: list[CaretValueRule] = []
        for index, (key, _) in enumerate(entries):
            if key == "url" and is_standard_url(resource_type, config, resource):
                continue
            rule = self._build_rule(
                index,
                entries,
                resource_type,
                fisher,
                f"{resource_type} {resource.get('name') or resource.get('id')}",
            )
            if rule is not None:
                rules.append(rule)
        return rules

    def process_concept(
        self,
        concept: dict,
        concept_hierarchy: list[str],
        code_system_name: str,
        fisher: Fishable,
    ) -> list[CaretValueRule]:
        """Extract caret value rules for one CodeSystem concept.

        ``code``, ``display``, ``definition`` and child concepts are written by
        the concept rule itself and are skipped here.
        """
        entries = [
            (key, value)
            for key, value in self._flatten(concept)
            if not is_ignored(key, CONCEPT_IGNORED_PROPERTIES)
        ]

        rules: list[CaretValueRule] = []
        for index, (key, _) in enumerate(entries):
            value = self._resolve(index, entries, "Concept", fisher)
            if self._is_empty(value):
                self._logger.error(
                    "Value in CodeSystem %s at concept %s for element %s is empty. "
                    "No caret value rule will be created.",
                    code_system_name,
                    ".".join(concept_hierarchy),
                    key,
                )
                continue
            rules.append(
                CaretValueRule(
                    path="",
                    caret_path=key,
                    value=value,
                    is_code_caret_rule=True,
                    path_array=tuple(concept_hierarchy),
                )
            )
        return rules

    def _reconcile_arrays(self, sd: dict, parent: dict) -> None:
        # only top-level arrays are considered
        for key in list(sd.keys()):
            items = sd[key]
            if not isinstance(items, list) or not items:
                continue
            parent_items = parent.get(key)
            if isinstance(parent_items, list):
                has_new_items = not is_subset(items, parent_items)
            else:
                has_new_items = True

            if has_new_items and key in EXTENSION_ARRAY_PROPERTIES:
                parent.pop(key, None)
            elif not has_new_items:
                del sd[key]

    def _build_rule(
        self,
        index: int,
        entries: list[FlatEntry],
        resource_kind: str,
        fisher: Fishable,
        owner: str,
    ) -> CaretValueRule | None:
        key = entries[index][0]
        value = self._resolve(index, entries, resource_kind, fisher)
        if self._is_empty(value):
            self._logger.error(
                "Value in %s for element %s is empty. No caret value rule will be created.",
                owner,
                key,
            )
            return None
        return CaretValueRule(path="", caret_path=key, value=value)
