"""Rules that appear inside FSH definitions.

Rules are immutable once created. Each rule class carries a ``kind`` tag;
code that needs to classify rules (for example the exporter looking for
references to inline instances) switches on that tag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from ..utils.values import FshCode, FshValue, quote_string, render_value


class RuleKind(str, Enum):
    CARET_VALUE = "caret_value"
    ASSIGNMENT = "assignment"
    OBEYS = "obeys"
    CONCEPT = "concept"
    VALUE_SET_CONCEPT_COMPONENT = "value_set_concept_component"
    VALUE_SET_FILTER_COMPONENT = "value_set_filter_component"
    MAPPING = "mapping"


INSTANCE_REFERENCE_KINDS = {RuleKind.ASSIGNMENT, RuleKind.CARET_VALUE}


@dataclass(frozen=True)
class CaretValueRule:
    """``* path ^caretPath = value``; an empty path targets the definition itself."""

    path: str
    caret_path: str = ""
    value: FshValue = None
    fsh_comment: str | None = None
    is_code_caret_rule: bool = False
    path_array: tuple[str, ...] = ()
    is_instance: bool = False

    kind: ClassVar[RuleKind] = RuleKind.CARET_VALUE

    def to_fsh(self) -> str:
        if self.is_code_caret_rule:
            target = " ".join(f"#{code}" for code in self.path_array) + " "
        elif self.path:
            target = f"{self.path} "
        else:
            target = ""
        line = f"* {target}^{self.caret_path} = {render_value(self.value, raw=self.is_instance)}"
        return _with_comment(line, self.fsh_comment)


@dataclass(frozen=True)
class AssignmentRule:
    path: str
    value: FshValue = None
    exactly: bool = False
    is_instance: bool = False

    kind: ClassVar[RuleKind] = RuleKind.ASSIGNMENT

    def to_fsh(self) -> str:
        line = f"* {self.path} = {render_value(self.value, raw=self.is_instance)}"
        return f"{line} (exactly)" if self.exactly else line


@dataclass(frozen=True)
class ObeysRule:
    path: str = ""
    keys: tuple[str, ...] = ()

    kind: ClassVar[RuleKind] = RuleKind.OBEYS

    def to_fsh(self) -> str:
        target = f"{self.path} " if self.path and self.path != "." else ""
        return f"* {target}obeys {' and '.join(self.keys)}"


@dataclass(frozen=True)
class ConceptRule:
    code: str
    display: str | None = None
    definition: str | None = None
    hierarchy: tuple[str, ...] = ()

    kind: ClassVar[RuleKind] = RuleKind.CONCEPT

    def to_fsh(self) -> str:
        parts = [f"#{code}" for code in self.hierarchy]
        parts.append(str(FshCode(self.code)))
        if self.display is not None:
            parts.append(quote_string(self.display))
        if self.definition is not None:
            if self.display is None:
                parts.append('""')
            parts.append(quote_string(self.definition))
        return "* " + " ".join(parts)


CODE_FILTER_OPERATORS = {"is-a", "descendent-of", "is-not-a", "generalizes", "in", "not-in"}


@dataclass(frozen=True)
class ValueSetFilter:
    property: str
    operator: str
    value: str | bool

    def to_fsh(self) -> str:
        if isinstance(self.value, bool):
            value = render_value(self.value)
        elif self.operator in CODE_FILTER_OPERATORS:
            value = str(FshCode(self.value))
        else:
            value = quote_string(self.value)
        return f"{self.property} {self.operator} {value}"


@dataclass(frozen=True)
class ValueSetConceptComponentRule:
    inclusion: bool = True
    system: str | None = None
    value_sets: tuple[str, ...] = ()
    concepts: tuple[FshCode, ...] = ()

    kind: ClassVar[RuleKind] = RuleKind.VALUE_SET_CONCEPT_COMPONENT

    def to_fsh(self) -> str:
        keyword = "include" if self.inclusion else "exclude"
        suffix = _from_value_sets(self.value_sets)
        return "\n".join(f"* {keyword} {concept}{suffix}" for concept in self.concepts)


@dataclass(frozen=True)
class ValueSetFilterComponentRule:
    inclusion: bool = True
    system: str | None = None
    value_sets: tuple[str, ...] = ()
    filters: tuple[ValueSetFilter, ...] = field(default_factory=tuple)

    kind: ClassVar[RuleKind] = RuleKind.VALUE_SET_FILTER_COMPONENT

    def to_fsh(self) -> str:
        keyword = "include" if self.inclusion else "exclude"
        sources = []
        if self.system:
            sources.append(f"system {self.system}")
        sources.extend(f"valueset {value_set}" for value_set in self.value_sets)
        line = f"* {keyword} codes from {' and '.join(sources)}"
        if self.filters:
            line += " where " + " and ".join(f.to_fsh() for f in self.filters)
        return line


@dataclass(frozen=True)
class MappingRule:
    path: str
    map: str
    comment: str | None = None
    language: str | None = None

    kind: ClassVar[RuleKind] = RuleKind.MAPPING

    def to_fsh(self) -> str:
        target = f"{self.path} " if self.path and self.path != "." else ""
        line = f"* {target}-> {quote_string(self.map)}"
        if self.comment:
            line += f" {quote_string(self.comment)}"
        if self.language:
            line += f" #{self.language}"
        return line


Rule = (
    CaretValueRule
    | AssignmentRule
    | ObeysRule
    | ConceptRule
    | ValueSetConceptComponentRule
    | ValueSetFilterComponentRule
    | MappingRule
)


def _with_comment(line: str, comment: str | None) -> str:
    if not comment:
        return line
    comment_lines = [f"// {text}" for text in comment.split("\n")]
    return "\n".join([*comment_lines, line])


def _from_value_sets(value_sets: tuple[str, ...]) -> str:
    if not value_sets:
        return ""
    return " from " + " and ".join(f"valueset {value_set}" for value_set in value_sets)
