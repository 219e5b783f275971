"""Jinja2 rendering of named FSH definitions."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from .values import quote_string

FILES_FOLDER = Path(__file__).parent.parent / "files"
DEFINITION_TEMPLATE = "definition.fsh.j2"

_env = Environment(
    loader=FileSystemLoader(FILES_FOLDER),
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
)
_env.filters["fsh_string"] = quote_string


def render_definition(definition) -> str:
    template = _env.get_template(DEFINITION_TEMPLATE)
    return template.render(item=definition).strip()


def format_table(rows: list[list[str]], separator: str = "  ") -> str:
    """Render rows as left aligned text columns."""
    if not rows:
        return ""
    widths = [max(len(row[column]) for row in rows) for column in range(len(rows[0]))]
    lines = []
    for row in rows:
        cells = [cell.ljust(width) for cell, width in zip(row, widths)]
        lines.append(separator.join(cells).rstrip())
    return "\n".join(lines)
