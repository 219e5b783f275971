"""Property lists shared by the caret value rule extractors.

Properties listed here are either owned by another extractor or by a FSH
keyword, or are cleared by SUSHI when it derives a new StructureDefinition
from its parent.
"""

CONCEPT_IGNORED_PROPERTIES = ["code", "display", "definition", "concept"]

RESOURCE_IGNORED_PROPERTIES = {
    "ValueSet": [
        "resourceType",
        "id",
        "name",
        "title",
        "description",
        "compose.include",
        "compose.exclude",
    ],
    "CodeSystem": ["resourceType", "id", "name", "title", "description", "concept"],
    "StructureDefinition": [
        "resourceType",
        "id",
        "name",
        "title",
        "description",
        "fhirVersion",
        "mapping",
        "baseDefinition",
        "derivation",
        "snapshot",
        "differential",
    ],
}

# SUSHI does not inherit these from the parent when it creates a profile
SD_CLEARED_PROPERTIES = [
    "meta",
    "implicitRules",
    "language",
    "text",
    "contained",
    "identifier",
    "experimental",
    "date",
    "publisher",
    "contact",
    "useContext",
    "jurisdiction",
    "purpose",
    "copyright",
    "keyword",
]

# Arrays SUSHI rewrites itself before rules are applied
EXTENSION_ARRAY_PROPERTIES = {"extension", "modifierExtension"}

# Status SUSHI assigns to every generated StructureDefinition
DEFAULT_STATUS = "active"

ELEMENT_CLAIMED_PROPERTIES = ["id", "path"]

INDEX_FILE_NAME = "index.txt"
