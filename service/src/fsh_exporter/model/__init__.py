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
    InstanceUsage,
    NamedExportable,
)
from .package import Package
from .rules import (
    AssignmentRule,
    CaretValueRule,
    ConceptRule,
    MappingRule,
    ObeysRule,
    Rule,
    RuleKind,
    ValueSetConceptComponentRule,
    ValueSetFilter,
    ValueSetFilterComponentRule,
)

__all__ = [
    "AssignmentRule",
    "CaretValueRule",
    "ConceptRule",
    "Exportable",
    "ExportableAlias",
    "ExportableCodeSystem",
    "ExportableExtension",
    "ExportableInstance",
    "ExportableInvariant",
    "ExportableKind",
    "ExportableMapping",
    "ExportableProfile",
    "ExportableValueSet",
    "InstanceUsage",
    "MappingRule",
    "NamedExportable",
    "ObeysRule",
    "Package",
    "Rule",
    "RuleKind",
    "ValueSetConceptComponentRule",
    "ValueSetFilter",
    "ValueSetFilterComponentRule",
]
