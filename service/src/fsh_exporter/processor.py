"""Builds the ``Package`` for a set of FHIR resources.

Pass order is fixed: StructureDefinitions, CodeSystems, ValueSets, other
resources as example Instances, then the value set URL optimizer. The
package is only ever appended to; the exporter reads it afterwards.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from .data.config import ExportConfig
from .errors import ResourceLoadError
from .extractor.element_caret_extractor import (
    ElementCaretExtractor,
    ProcessableElementDefinition,
)
from .extractor.resource_caret_extractor import ResourceCaretExtractor
from .fisher import PARENT_TYPES, Fishable, FishableType, classify
from .model.exportable import (
    ExportableCodeSystem,
    ExportableExtension,
    ExportableInstance,
    ExportableProfile,
    ExportableValueSet,
    InstanceUsage,
)
from .model.package import Package
from .model.rules import (
    AssignmentRule,
    ConceptRule,
    ValueSetConceptComponentRule,
    ValueSetFilter,
    ValueSetFilterComponentRule,
)
from .optimizer import optimize
from .utils.flatten import flatten
from .utils.values import FshCode, is_fsh_value_empty, resolve_value

logger = logging.getLogger(__name__)

INSTANCE_IGNORED_PROPERTIES = {"resourceType", "id"}


def load_resources(directory: str | Path) -> list[dict]:
    resources = []
    for file in sorted(Path(directory).glob("**/*.json")):
        try:
            content = json.loads(file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ResourceLoadError(file, str(e)) from e
        if not isinstance(content, dict) or "resourceType" not in content:
            logger.info("Skipping '%s': not a FHIR resource", file)
            continue
        resources.append(content)
    return resources


class FHIRProcessor:
    def __init__(
        self,
        fisher: Fishable,
        config: ExportConfig,
        *,
        element_extractor: ElementCaretExtractor | None = None,
        resource_extractor: ResourceCaretExtractor | None = None,
    ) -> None:
        self.fisher = fisher
        self.config = config
        self.element_extractor = element_extractor or ElementCaretExtractor()
        self.resource_extractor = resource_extractor or ResourceCaretExtractor()

    def process(self, resources: Iterable[dict]) -> Package:
        resources = list(resources)
        fsh_package = Package()

        passes = [
            ("StructureDefinition", self._process_structure_definition),
            ("CodeSystem", self._process_code_system),
            ("ValueSet", self._process_value_set),
        ]
        for resource_type, handler in passes:
            for resource in resources:
                if resource.get("resourceType") == resource_type:
                    self._run(handler, resource, fsh_package)

        for resource in resources:
            if resource.get("resourceType") not in {"StructureDefinition", "CodeSystem", "ValueSet"}:
                self._run(self._process_instance, resource, fsh_package)

        optimize(fsh_package, self.fisher, alias=self.config.alias)
        return fsh_package

    def _run(self, handler, resource: dict, fsh_package: Package) -> None:
        try:
            handler(resource, fsh_package)
        except Exception:
            logger.exception(
                "Failed to process %s %s",
                resource.get("resourceType"),
                resource.get("name") or resource.get("id"),
            )

    def _process_structure_definition(self, sd: dict, fsh_package: Package) -> None:
        fishable_type = classify(sd)
        if fishable_type == FishableType.EXTENSION:
            exportable_class = ExportableExtension
        elif fishable_type == FishableType.PROFILE:
            exportable_class = ExportableProfile
        else:
            logger.info(
                "StructureDefinition %s is a %s definition and is not exported",
                sd.get("name"),
                fishable_type.value,
            )
            return

        exportable = exportable_class(
            name=sd.get("name") or sd.get("id"),
            id=sd.get("id"),
            title=sd.get("title"),
            description=sd.get("description"),
            parent=self._parent_name(sd.get("baseDefinition")),
        )
        exportable.rules.extend(
            self.resource_extractor.process_structure_definition(sd, self.fisher, self.config)
        )
        for element_json in (sd.get("differential") or {}).get("element") or []:
            element = ProcessableElementDefinition(element_json)
            exportable.rules.extend(self.element_extractor.process(element, sd, self.fisher))
        fsh_package.add(exportable)

    def _process_code_system(self, code_system: dict, fsh_package: Package) -> None:
        exportable = ExportableCodeSystem(
            name=code_system.get("name") or code_system.get("id"),
            id=code_system.get("id"),
            title=code_system.get("title"),
            description=code_system.get("description"),
        )
        exportable.rules.extend(
            self.resource_extractor.process_resource(code_system, self.fisher, "CodeSystem", self.config)
        )
        self._add_concepts(exportable, code_system.get("concept") or [], [])
        fsh_package.add(exportable)

    def _add_concepts(
        self, exportable: ExportableCodeSystem, concepts: list[dict], hierarchy: list[str]
    ) -> None:
        for concept in concepts:
            code = concept.get("code")
            exportable.rules.append(
                ConceptRule(
                    code=code,
                    display=concept.get("display"),
                    definition=concept.get("definition"),
                    hierarchy=tuple(hierarchy),
                )
            )
            exportable.rules.extend(
                self.resource_extractor.process_concept(
                    concept, [*hierarchy, code], exportable.name, self.fisher
                )
            )
            self._add_concepts(exportable, concept.get("concept") or [], [*hierarchy, code])

    def _process_value_set(self, value_set: dict, fsh_package: Package) -> None:
        exportable = ExportableValueSet(
            name=value_set.get("name") or value_set.get("id"),
            id=value_set.get("id"),
            title=value_set.get("title"),
            description=value_set.get("description"),
        )
        compose = value_set.get("compose") or {}
        for inclusion, key in ((True, "include"), (False, "exclude")):
            for component in compose.get(key) or []:
                exportable.rules.append(_component_rule(component, inclusion))
        exportable.rules.extend(
            self.resource_extractor.process_resource(value_set, self.fisher, "ValueSet", self.config)
        )
        fsh_package.add(exportable)

    def _process_instance(self, resource: dict, fsh_package: Package) -> None:
        instance_of = resource.get("resourceType")
        profiles = (resource.get("meta") or {}).get("profile") or []
        if profiles:
            metadata = self.fisher.fish_for_metadata(
                profiles[0], FishableType.PROFILE, FishableType.EXTENSION
            )
            if metadata is not None and metadata.name:
                instance_of = metadata.name

        exportable = ExportableInstance(
            name=resource.get("id") or f"{instance_of}-{len(fsh_package.instances) + 1}",
            instance_of=instance_of,
            usage=InstanceUsage.EXAMPLE,
        )
        entries = [
            (key, value)
            for key, value in flatten(resource)
            if key not in INSTANCE_IGNORED_PROPERTIES
        ]
        for index, (key, _) in enumerate(entries):
            value = resolve_value(index, entries, instance_of, self.fisher)
            if is_fsh_value_empty(value):
                logger.error(
                    "Value in Instance %s for element %s is empty. No assignment rule will be created.",
                    exportable.name,
                    key,
                )
                continue
            exportable.rules.append(AssignmentRule(path=key, value=value))
        fsh_package.add(exportable)

    def _parent_name(self, base_definition: str | None) -> str | None:
        if not base_definition:
            return None
        metadata = self.fisher.fish_for_metadata(base_definition, *PARENT_TYPES)
        if metadata is not None and metadata.name:
            return metadata.name
        return base_definition


def _component_rule(component: dict, inclusion: bool):
    system = component.get("system")
    if system and component.get("version"):
        system = f"{system}|{component['version']}"
    value_sets = tuple(component.get("valueSet") or [])

    concepts = component.get("concept") or []
    if concepts:
        return ValueSetConceptComponentRule(
            inclusion=inclusion,
            system=system,
            value_sets=value_sets,
            concepts=tuple(
                FshCode(concept.get("code"), system, concept.get("display")) for concept in concepts
            ),
        )
    return ValueSetFilterComponentRule(
        inclusion=inclusion,
        system=system,
        value_sets=value_sets,
        filters=tuple(
            ValueSetFilter(f.get("property"), f.get("op"), f.get("value", ""))
            for f in component.get("filter") or []
        ),
    )
