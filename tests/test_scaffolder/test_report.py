"""Tests for the jinja2 report renderer (carto_create.scaffolder.report)."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound, UndefinedError

from carto_create.scaffolder import ReportRenderer
from carto_create.scaffolder.generator import NextStep


pytestmark = pytest.mark.unit


class TestReportRenderer:
    def test_directories(self):
        text = ReportRenderer().render(
            "directories.txt.j2",
            {"template_dir": Path("/t/create-react"), "project_dir": Path("/work/app")},
        )
        assert "Template directory" in text
        assert "/t/create-react" in text
        assert "/work/app" in text

    def test_next_steps(self):
        text = ReportRenderer().render(
            "next_steps.txt.j2",
            {
                "title": "Demo",
                "steps": [NextStep("yarn"), NextStep("yarn dev:ssl", "required for OAuth")],
            },
        )
        assert 'Project "Demo" was created!' in text
        assert "yarn dev:ssl [dim]# required for OAuth[/dim]" in text

    def test_markup_filter_escapes(self):
        text = ReportRenderer().render(
            "directories.txt.j2",
            {"template_dir": Path("/t/[bold]x"), "project_dir": Path("/work/app")},
        )
        assert "/t/\\[bold]x" in text

    def test_missing_variable_raises(self):
        with pytest.raises(UndefinedError):
            ReportRenderer().render("next_steps.txt.j2", {"steps": []})

    def test_custom_directory(self, tmp_path: Path):
        (tmp_path / "hello.txt.j2").write_text("Hello {{ name | markup }}", encoding="utf-8")
        renderer = ReportRenderer(tmp_path)
        assert renderer.render("hello.txt.j2", {"name": "[carto]"}) == "Hello \\[carto]"

    def test_unknown_template(self):
        with pytest.raises(TemplateNotFound):
            ReportRenderer().render("missing.txt.j2", {})
