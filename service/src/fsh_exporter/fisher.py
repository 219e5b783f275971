"""Lookup of FHIR definitions by url, id or name ("fishing").

Lookups are side-effect free; ``PackageFisher`` caches every answer until a
new definition is added.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class FishableType(str, Enum):
    RESOURCE = "Resource"
    TYPE = "Type"
    PROFILE = "Profile"
    EXTENSION = "Extension"
    LOGICAL = "Logical"
    VALUE_SET = "ValueSet"
    CODE_SYSTEM = "CodeSystem"
    INSTANCE = "Instance"


PARENT_TYPES = (
    FishableType.RESOURCE,
    FishableType.TYPE,
    FishableType.PROFILE,
    FishableType.EXTENSION,
    FishableType.LOGICAL,
)


class FishMetadata(BaseModel):
    id: str | None = None
    name: str | None = None
    url: str | None = None
    resource_type: str | None = None
    sd_type: str | None = None
    parent: str | None = None
    fishable_type: FishableType


class Fishable(Protocol):
    def fish_for_fhir(self, item: str, *types: FishableType) -> dict | None:
        ...

    def fish_for_metadata(self, item: str, *types: FishableType) -> FishMetadata | None:
        ...


def classify(definition: dict) -> FishableType:
    resource_type = definition.get("resourceType")
    if resource_type == "StructureDefinition":
        if definition.get("kind") == "logical":
            return FishableType.LOGICAL
        if definition.get("derivation") == "constraint":
            if definition.get("type") == "Extension":
                return FishableType.EXTENSION
            return FishableType.PROFILE
        if definition.get("kind") == "resource":
            return FishableType.RESOURCE
        return FishableType.TYPE
    if resource_type == "ValueSet":
        return FishableType.VALUE_SET
    if resource_type == "CodeSystem":
        return FishableType.CODE_SYSTEM
    return FishableType.INSTANCE


class PackageFisher:
    """In-memory ``Fishable`` over a list of FHIR JSON definitions."""

    def __init__(self, definitions: Iterable[dict] = ()) -> None:
        self._definitions: list[dict] = []
        self._cache: dict[tuple, int | None] = {}
        for definition in definitions:
            self.add(definition)

    @classmethod
    def from_directory(cls, directory: str | Path) -> "PackageFisher":
        fisher = cls()
        for file in sorted(Path(directory).glob("**/*.json")):
            definition = _read_definition(file)
            if definition is not None:
                fisher.add(definition)
        logger.info("Loaded %d definitions from %s", len(fisher), directory)
        return fisher

    def __len__(self) -> int:
        return len(self._definitions)

    def add(self, definition: dict) -> None:
        self._definitions.append(definition)
        self._cache.clear()

    def fish_for_fhir(self, item: str, *types: FishableType) -> dict | None:
        index = self._find(item, types)
        return None if index is None else self._definitions[index]

    def fish_for_metadata(self, item: str, *types: FishableType) -> FishMetadata | None:
        definition = self.fish_for_fhir(item, *types)
        if definition is None:
            return None
        return FishMetadata(
            id=definition.get("id"),
            name=definition.get("name"),
            url=definition.get("url"),
            resource_type=definition.get("resourceType"),
            sd_type=definition.get("type"),
            parent=definition.get("baseDefinition"),
            fishable_type=classify(definition),
        )

    def _find(self, item: str, types: tuple[FishableType, ...]) -> int | None:
        if not item:
            return None
        cache_key = (item, types)
        if cache_key not in self._cache:
            self._cache[cache_key] = self._search(item, set(types))
        return self._cache[cache_key]

    def _search(self, item: str, types: set[FishableType]) -> int | None:
        base, _, version = item.partition("|")
        for index, definition in enumerate(self._definitions):
            if types and classify(definition) not in types:
                continue
            if definition.get("url") == base:
                if not version or definition.get("version") == version:
                    return index
            elif item in (definition.get("id"), definition.get("name")):
                return index
        return None


def _read_definition(file: Path) -> dict | None:
    try:
        content = json.loads(file.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Skipping '%s': %s", file, e)
        return None
    if not isinstance(content, dict) or "resourceType" not in content:
        return None
    return content
