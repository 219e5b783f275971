"""Replace URLs in value set component rules with names or aliases."""

from __future__ import annotations

import dataclasses
import logging
import re

from ..fisher import Fishable, FishableType
from ..model.exportable import ExportableAlias
from ..model.package import Package
from ..model.rules import RuleKind

logger = logging.getLogger(__name__)

URL_SEPARATORS = re.compile(r"[/:#]")
INVALID_ALIAS_CHARACTERS = re.compile(r"[^A-Za-z0-9_.\-]")

COMPONENT_RULE_KINDS = {
    RuleKind.VALUE_SET_CONCEPT_COMPONENT,
    RuleKind.VALUE_SET_FILTER_COMPONENT,
}


def optimize_url(
    url: str,
    aliases: list[ExportableAlias],
    types: tuple[FishableType, ...],
    fisher: Fishable,
    alias: bool = True,
) -> str:
    """Name of the definition behind ``url``, or an alias for it.

    A new alias is appended to ``aliases`` when none exists yet. A
    ``|version`` suffix is kept.
    """
    base_url, _, version = url.partition("|")
    new_url = url

    metadata = fisher.fish_for_metadata(base_url, *types)
    if metadata is not None and metadata.name:
        new_url = metadata.name
    elif alias:
        existing = next((a for a in aliases if a.url == base_url), None)
        if existing is not None:
            new_url = existing.alias
        else:
            new_url = _unique_alias(base_url, aliases)
            aliases.append(ExportableAlias(alias=new_url, url=base_url))
            logger.debug("Created alias %s for %s", new_url, base_url)
    else:
        return url

    return f"{new_url}|{version}" if version else new_url


def optimize(fsh_package: Package, fisher: Fishable, *, alias: bool = True) -> None:
    for value_set in fsh_package.value_sets:
        value_set.rules = [
            _optimize_rule(rule, fsh_package.aliases, fisher, alias)
            if rule.kind in COMPONENT_RULE_KINDS
            else rule
            for rule in value_set.rules
        ]


def _optimize_rule(rule, aliases, fisher, alias):
    changes = {}
    if rule.system:
        changes["system"] = optimize_url(
            rule.system, aliases, (FishableType.CODE_SYSTEM,), fisher, alias
        )
    if rule.value_sets:
        changes["value_sets"] = tuple(
            optimize_url(url, aliases, (FishableType.VALUE_SET,), fisher, alias)
            for url in rule.value_sets
        )
    if rule.kind == RuleKind.VALUE_SET_CONCEPT_COMPONENT:
        changes["concepts"] = tuple(
            dataclasses.replace(
                concept,
                system=optimize_url(
                    concept.system, aliases, (FishableType.CODE_SYSTEM,), fisher, alias
                ),
            )
            if concept.system
            else concept
            for concept in rule.concepts
        )
    return dataclasses.replace(rule, **changes)


def _unique_alias(url: str, aliases: list[ExportableAlias]) -> str:
    last_part = next((part for part in reversed(URL_SEPARATORS.split(url)) if part), "")
    base = "$" + (INVALID_ALIAS_CHARACTERS.sub("", last_part) or "alias")
    existing = {a.alias for a in aliases}
    candidate = base
    counter = 0
    while candidate in existing:
        counter += 1
        candidate = f"{base}_{counter}"
    return candidate

