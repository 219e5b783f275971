"""Export FHIR conformance resources as FHIR Shorthand (FSH)."""

from .data.config import ExportConfig, OutputStyle
from .export.fsh_exporter import FSHExporter
from .extractor import ElementCaretExtractor, ProcessableElementDefinition, ResourceCaretExtractor
from .fisher import Fishable, FishableType, PackageFisher
from .model.package import Package
from .processor import FHIRProcessor

__all__ = [
    "ElementCaretExtractor",
    "ExportConfig",
    "FHIRProcessor",
    "FSHExporter",
    "Fishable",
    "FishableType",
    "OutputStyle",
    "Package",
    "PackageFisher",
    "ProcessableElementDefinition",
    "ResourceCaretExtractor",
]
