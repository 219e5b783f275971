from __future__ import annotations

import re

CHOICE_SLICE_MARKER = "[x]:"
INDEX_SUFFIX = re.compile(r"\[\d+\]$")


def get_fsh_path(element_id: str) -> str:
    """Convert an ElementDefinition id into the path FSH rules are written against.

    The root element maps to ``.``. Slices are written with brackets and
    choice-type slices use the type-specific element name::

        >>> get_fsh_path("Observation.value[x]:valueQuantity.unit")
        'valueQuantity.unit'
        >>> get_fsh_path("Patient.extension:race")
        'extension[race]'
    """
    segments = element_id.split(".")
    if len(segments) == 1:
        return "."

    fsh_segments = []
    for segment in segments[1:]:
        marker = segment.find(CHOICE_SLICE_MARKER)
        if marker > -1:
            fsh_segments.append(segment[marker + len(CHOICE_SLICE_MARKER):])
        elif ":" in segment:
            base, slice_name = segment.split(":", 1)
            fsh_segments.append(base + "".join(f"[{part}]" for part in slice_name.split("/")))
        else:
            fsh_segments.append(segment)
    return ".".join(fsh_segments)


def alternate_choice_id(element_id: str) -> str:
    """Rewrite ``Observation.value[x]:valueQuantity`` as ``Observation.valueQuantity``."""
    parts = []
    for segment in element_id.split("."):
        marker = segment.find(CHOICE_SLICE_MARKER)
        parts.append(segment[marker + len(CHOICE_SLICE_MARKER):] if marker > -1 else segment)
    return ".".join(parts)


def leaf_name(path: str) -> str:
    """Last segment of a flattened path without its array index."""
    return INDEX_SUFFIX.sub("", path.rsplit(".", 1)[-1])


def parent_path(path: str) -> str | None:
    if "." not in path:
        return None
    return path.rsplit(".", 1)[0]
