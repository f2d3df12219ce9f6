"""Jinja2 rendering of console reports.

Report templates live in ``carto_create/templates/`` and produce rich
markup, printed by the orchestrator once a project has been generated.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from rich.markup import escape

_DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class ReportRenderer:
    """Renders ``*.j2`` report templates with a context dictionary."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # User-provided text (titles, paths) must not be parsed as rich markup.
        self.env.filters["markup"] = lambda value: escape(str(value))

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render *template_path* (relative to the template directory)."""
        template = self.env.get_template(template_path)
        return template.render(**context)
