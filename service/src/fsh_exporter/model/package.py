from __future__ import annotations

from dataclasses import dataclass, field

from .exportable import (
    Exportable,
    ExportableAlias,
    ExportableCodeSystem,
    ExportableExtension,
    ExportableInstance,
    ExportableInvariant,
    ExportableKind,
    ExportableMapping,
    ExportableProfile,
    ExportableValueSet,
)

CATEGORY_ATTRIBUTES = {
    ExportableKind.ALIAS: "aliases",
    ExportableKind.PROFILE: "profiles",
    ExportableKind.EXTENSION: "extensions",
    ExportableKind.CODE_SYSTEM: "code_systems",
    ExportableKind.VALUE_SET: "value_sets",
    ExportableKind.INSTANCE: "instances",
    ExportableKind.INVARIANT: "invariants",
    ExportableKind.MAPPING: "mappings",
}


@dataclass
class Package:
    """All definitions produced for one export run, grouped by category.

    Insertion order inside a category is the order definitions are written.
    """

    aliases: list[ExportableAlias] = field(default_factory=list)
    profiles: list[ExportableProfile] = field(default_factory=list)
    extensions: list[ExportableExtension] = field(default_factory=list)
    code_systems: list[ExportableCodeSystem] = field(default_factory=list)
    value_sets: list[ExportableValueSet] = field(default_factory=list)
    instances: list[ExportableInstance] = field(default_factory=list)
    invariants: list[ExportableInvariant] = field(default_factory=list)
    mappings: list[ExportableMapping] = field(default_factory=list)

    def add(self, exportable: Exportable) -> None:
        self.category(exportable.kind).append(exportable)

    def category(self, kind: ExportableKind) -> list:
        return getattr(self, CATEGORY_ATTRIBUTES[kind])
