"""Definitions that can be written as FSH.

The set of exportables is closed: each class carries an ``ExportableKind``
tag and the exporter places definitions by switching on that tag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from ..utils.rendering import render_definition
from ..utils.values import quote_string
from .rules import Rule


class ExportableKind(str, Enum):
    ALIAS = "Alias"
    PROFILE = "Profile"
    EXTENSION = "Extension"
    CODE_SYSTEM = "CodeSystem"
    VALUE_SET = "ValueSet"
    INSTANCE = "Instance"
    INVARIANT = "Invariant"
    MAPPING = "Mapping"


class InstanceUsage(str, Enum):
    EXAMPLE = "Example"
    DEFINITION = "Definition"
    INLINE = "Inline"


@dataclass
class ExportableAlias:
    alias: str
    url: str

    kind: ClassVar[ExportableKind] = ExportableKind.ALIAS

    def to_fsh(self) -> str:
        return f"Alias: {self.alias} = {self.url}"


@dataclass
class _NamedExportable:
    name: str
    id: str | None = None
    title: str | None = None
    description: str | None = None
    rules: list[Rule] = field(default_factory=list)

    kind: ClassVar[ExportableKind]

    def metadata(self) -> list[tuple[str, str]]:
        return _metadata(
            ("Id", self.id),
            ("Title", quote_string(self.title) if self.title else None),
            ("Description", quote_string(self.description) if self.description else None),
        )

    def to_fsh(self) -> str:
        return render_definition(self)


@dataclass
class ExportableProfile(_NamedExportable):
    parent: str | None = None

    kind: ClassVar[ExportableKind] = ExportableKind.PROFILE

    def metadata(self) -> list[tuple[str, str]]:
        return _metadata(("Parent", self.parent)) + super().metadata()


@dataclass
class ExportableExtension(ExportableProfile):
    kind: ClassVar[ExportableKind] = ExportableKind.EXTENSION


@dataclass
class ExportableCodeSystem(_NamedExportable):
    kind: ClassVar[ExportableKind] = ExportableKind.CODE_SYSTEM


@dataclass
class ExportableValueSet(_NamedExportable):
    kind: ClassVar[ExportableKind] = ExportableKind.VALUE_SET


@dataclass
class ExportableInstance(_NamedExportable):
    instance_of: str | None = None
    usage: InstanceUsage = InstanceUsage.EXAMPLE

    kind: ClassVar[ExportableKind] = ExportableKind.INSTANCE

    def metadata(self) -> list[tuple[str, str]]:
        return (
            _metadata(("InstanceOf", self.instance_of), ("Usage", f"#{self.usage.value.lower()}"))
            + _metadata(
                ("Title", quote_string(self.title) if self.title else None),
                ("Description", quote_string(self.description) if self.description else None),
            )
        )


@dataclass
class ExportableInvariant(_NamedExportable):
    severity: str | None = None
    expression: str | None = None
    xpath: str | None = None

    kind: ClassVar[ExportableKind] = ExportableKind.INVARIANT

    def metadata(self) -> list[tuple[str, str]]:
        return _metadata(
            ("Description", quote_string(self.description) if self.description else None),
            ("Severity", f"#{self.severity}" if self.severity else None),
            ("Expression", quote_string(self.expression) if self.expression else None),
            ("XPath", quote_string(self.xpath) if self.xpath else None),
        )


@dataclass
class ExportableMapping(_NamedExportable):
    source: str | None = None
    target: str | None = None

    kind: ClassVar[ExportableKind] = ExportableKind.MAPPING

    def metadata(self) -> list[tuple[str, str]]:
        return _metadata(
            ("Id", self.id),
            ("Source", self.source),
            ("Target", quote_string(self.target) if self.target else None),
            ("Title", quote_string(self.title) if self.title else None),
            ("Description", quote_string(self.description) if self.description else None),
        )


NamedExportable = (
    ExportableProfile
    | ExportableExtension
    | ExportableCodeSystem
    | ExportableValueSet
    | ExportableInstance
    | ExportableInvariant
    | ExportableMapping
)
Exportable = ExportableAlias | NamedExportable


def _metadata(*pairs: tuple[str, str | None]) -> list[tuple[str, str]]:
    return [(keyword, value) for keyword, value in pairs if value]
