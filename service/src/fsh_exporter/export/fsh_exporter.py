"""Partitioning of a ``Package`` into FSH files plus ``index.txt``."""

from __future__ import annotations

import logging

from ..consts import INDEX_FILE_NAME
from ..data.config import OutputStyle
from ..model.exportable import (
    Exportable,
    ExportableInstance,
    ExportableInvariant,
    ExportableKind,
    InstanceUsage,
)
from ..model.package import Package
from ..model.rules import INSTANCE_REFERENCE_KINDS, RuleKind
from ..utils.rendering import format_table

logger = logging.getLogger(__name__)

DEFAULT_STYLE = OutputStyle.GROUP_BY_FSH_TYPE
INDEX_HEADER = ["Name", "Type", "File"]

# kinds whose rules may point at an inline instance
INSTANCE_REFERRING_KINDS = {
    ExportableKind.INSTANCE,
    ExportableKind.PROFILE,
    ExportableKind.EXTENSION,
}

COUNTED_CATEGORIES = [
    (ExportableKind.PROFILE, "Profile"),
    (ExportableKind.EXTENSION, "Extension"),
    (ExportableKind.CODE_SYSTEM, "CodeSystem"),
    (ExportableKind.VALUE_SET, "ValueSet"),
    (ExportableKind.INSTANCE, "Instance"),
    (ExportableKind.INVARIANT, "Invariant"),
    (ExportableKind.MAPPING, "Mapping"),
]

FileGroups = dict[str, list[Exportable]]


class FSHExporter:
    def __init__(self, fsh_package: Package, *, logger: logging.Logger = logger) -> None:
        self.fsh_package = fsh_package
        self._logger = logger

    def export(self, style: str | OutputStyle | None = None) -> dict[str, str]:
        """Render the package as ``{file name: FSH text}``.

        Files without content are left out and do not appear in the index.
        ``index.txt`` is always part of the result.
        """
        groupers = {
            OutputStyle.SINGLE_FILE: self.group_as_single_file,
            OutputStyle.GROUP_BY_FSH_TYPE: self.group_by_fsh_type,
            OutputStyle.FILE_PER_DEFINITION: self.group_as_file_per_definition,
            OutputStyle.GROUP_BY_PROFILE: self.group_by_profile,
        }
        files = groupers[self._resolve_style(style)]()

        for kind, label in COUNTED_CATEGORIES:
            count = len(self.fsh_package.category(kind))
            self._logger.info("Exported %d %s%s.", count, label, "" if count == 1 else "s")

        written_files: dict[str, str] = {}
        index: list[list[str]] = []
        for file, exportables in files.items():
            # aliases are joined by single line breaks and never indexed
            aliases = [e for e in exportables if e.kind == ExportableKind.ALIAS]
            named_exportables = [e for e in exportables if e.kind != ExportableKind.ALIAS]
            file_content = "\n\n".join(
                [
                    "\n".join(alias.to_fsh() for alias in aliases),
                    "\n\n".join(exportable.to_fsh() for exportable in named_exportables),
                ]
            ).strip()
            if not file_content:
                continue
            written_files[file] = file_content
            index.extend([e.name, e.kind.value, file] for e in named_exportables)

        index.sort(key=lambda row: row[0])
        written_files[INDEX_FILE_NAME] = format_table([INDEX_HEADER, *index])
        return written_files

    def _resolve_style(self, style: str | OutputStyle | None) -> OutputStyle:
        if style is None:
            return DEFAULT_STYLE
        try:
            return OutputStyle(style)
        except ValueError:
            self._logger.warning(
                'Unrecognized output style "%s". Defaulting to "%s" style.',
                style,
                DEFAULT_STYLE.value,
            )
            return DEFAULT_STYLE

    def group_as_single_file(self) -> FileGroups:
        pkg = self.fsh_package
        results: list[Exportable] = [
            *pkg.aliases,
            *pkg.profiles,
            *pkg.extensions,
            *pkg.code_systems,
            *pkg.value_sets,
            *pkg.instances,
            *pkg.invariants,
            *pkg.mappings,
        ]
        return {"resources.fsh": results}

    def group_as_file_per_definition(self) -> FileGroups:
        pkg = self.fsh_package
        files: FileGroups = {"aliases.fsh": list(pkg.aliases)}
        for category in (
            pkg.invariants,
            pkg.mappings,
            pkg.profiles,
            pkg.extensions,
            pkg.code_systems,
            pkg.value_sets,
            pkg.instances,
        ):
            for exportable in category:
                files[f"{exportable.name}-{exportable.kind.value}.fsh"] = [exportable]
        return files

    def group_by_fsh_type(self) -> FileGroups:
        pkg = self.fsh_package
        return {
            "aliases.fsh": list(pkg.aliases),
            "profiles.fsh": list(pkg.profiles),
            "extensions.fsh": list(pkg.extensions),
            "valueSets.fsh": list(pkg.value_sets),
            "codeSystems.fsh": list(pkg.code_systems),
            "instances.fsh": list(pkg.instances),
            "invariants.fsh": list(pkg.invariants),
            "mappings.fsh": list(pkg.mappings),
        }

    def group_by_profile(self) -> FileGroups:
        pkg = self.fsh_package
        files: FileGroups = {}

        for profile in pkg.profiles:
            files[f"{profile.name}.fsh"] = [profile]

        files.setdefault("instances.fsh", [])
        inline_instances = [i for i in pkg.instances if i.usage == InstanceUsage.INLINE]
        other_instances = [i for i in pkg.instances if i.usage != InstanceUsage.INLINE]

        # examples of a profile live next to it
        for instance in other_instances:
            profile_file = f"{instance.instance_of}.fsh"
            if instance.usage == InstanceUsage.EXAMPLE and profile_file in files:
                files[profile_file].append(instance)
            else:
                files["instances.fsh"].append(instance)

        # inline instances follow their only user
        for instance in inline_instances:
            used_in = self.inline_instance_used_in(instance, files)
            target = used_in[0] if len(used_in) == 1 else "instances.fsh"
            files[target].append(instance)

        files.setdefault("invariants.fsh", [])
        for invariant in pkg.invariants:
            used_in = self.invariant_used_in(invariant, files)
            target = used_in[0] if len(used_in) == 1 else "invariants.fsh"
            files[target].append(invariant)

        # a profile may share its file name with one of these groups
        files.setdefault("aliases.fsh", []).extend(pkg.aliases)
        files.setdefault("extensions.fsh", []).extend(pkg.extensions)
        files.setdefault("valueSets.fsh", []).extend(pkg.value_sets)
        files.setdefault("codeSystems.fsh", []).extend(pkg.code_systems)
        files.setdefault("mappings.fsh", []).extend(pkg.mappings)
        return files

    @staticmethod
    def inline_instance_used_in(inline_instance: ExportableInstance, files: FileGroups) -> list[str]:
        used_in: list[str] = []
        for file, exportables in files.items():
            for exportable in exportables:
                if exportable.kind not in INSTANCE_REFERRING_KINDS:
                    continue
                if any(
                    rule.kind in INSTANCE_REFERENCE_KINDS
                    and rule.is_instance
                    and rule.value == inline_instance.name
                    for rule in exportable.rules
                ):
                    if file not in used_in:
                        used_in.append(file)
        return used_in

    @staticmethod
    def invariant_used_in(invariant: ExportableInvariant, files: FileGroups) -> list[str]:
        used_in: list[str] = []
        for file, exportables in files.items():
            for exportable in exportables:
                if exportable.kind != ExportableKind.PROFILE:
                    continue
                if any(
                    rule.kind == RuleKind.OBEYS and invariant.name in rule.keys
                    for rule in exportable.rules
                ):
                    if file not in used_in:
                        used_in.append(file)
        return used_in
