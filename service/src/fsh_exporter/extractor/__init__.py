from .element_caret_extractor import (
    ElementCaretExtractor,
    ProcessableElementDefinition,
    find_matching_snapshot,
)
from .resource_caret_extractor import ResourceCaretExtractor, is_standard_url

__all__ = [
    "ElementCaretExtractor",
    "ProcessableElementDefinition",
    "ResourceCaretExtractor",
    "find_matching_snapshot",
    "is_standard_url",
]
