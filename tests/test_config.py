"""Unit tests for TemplatePolicy and GeneratorSettings (carto_create.config).

Tests cover:
- TemplatePolicy defaults, stylesheet destination, save/load, partial JSON
- GeneratorSettings defaults, template_path, save/load, from_env
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from carto_create.config import (
    DEFAULT_EXCLUDE_PATHS,
    GeneratorSettings,
    TemplatePolicy,
)


# ---------------------------------------------------------------------------
# TemplatePolicy
# ---------------------------------------------------------------------------


class TestTemplatePolicy:
    @pytest.mark.unit
    def test_default_values(self):
        policy = TemplatePolicy()
        assert ".env.local" in policy.exclude_paths
        assert "node_modules" in policy.exclude_paths
        assert policy.exclude_dependencies == ["@carto/create-common"]
        assert "version" in policy.exclude_manifest_fields
        assert "src/main.{ts,tsx}" in policy.update_paths
        assert policy.stylesheet_import == "@carto/create-common/style.css"
        assert policy.stylesheet_local == "./style.css"

    @pytest.mark.unit
    def test_defaults_are_not_shared(self):
        first = TemplatePolicy()
        first.exclude_paths.append("extra")
        assert "extra" not in TemplatePolicy().exclude_paths
        assert "extra" not in DEFAULT_EXCLUDE_PATHS

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "framework, expected",
        [
            ("angular", Path("style.css")),
            ("react", Path("src/style.css")),
            ("vue", Path("src/style.css")),
            (None, Path("src/style.css")),
        ],
    )
    def test_stylesheet_destination(self, framework, expected):
        assert TemplatePolicy().stylesheet_destination(framework) == expected

    @pytest.mark.unit
    def test_save_load_roundtrip(self, tmp_path: Path):
        policy = TemplatePolicy(
            exclude_paths=["build"],
            exclude_dependencies=["@org/create-common"],
            stylesheet_import="@org/create-common/style.css",
        )
        saved = policy.save(tmp_path / "nested" / "policy.json")
        assert saved.exists()

        loaded = TemplatePolicy.load(saved)
        assert loaded == policy

    @pytest.mark.unit
    def test_load_partial_keeps_defaults(self, tmp_path: Path):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps({"exclude_dependencies": ["@org/create-common"]}), encoding="utf-8")

        policy = TemplatePolicy.load(path)
        assert policy.exclude_dependencies == ["@org/create-common"]
        assert policy.exclude_paths == DEFAULT_EXCLUDE_PATHS

    @pytest.mark.unit
    def test_load_invalid_type(self, tmp_path: Path):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps({"exclude_paths": "node_modules"}), encoding="utf-8")
        with pytest.raises(ValidationError):
            TemplatePolicy.load(path)


# ---------------------------------------------------------------------------
# GeneratorSettings
# ---------------------------------------------------------------------------


class TestGeneratorSettings:
    @pytest.mark.unit
    def test_default_values(self):
        settings = GeneratorSettings()
        assert settings.lockfile_name == "yarn.lock"
        assert settings.package_manager == "yarn"
        assert settings.templates_root == Path("./packages")
        assert settings.verbose is False
        assert sorted(settings.template_dirs) == ["angular", "react", "vue"]

    @pytest.mark.unit
    def test_template_path(self, tmp_path: Path):
        settings = GeneratorSettings(templates_root=tmp_path)
        assert settings.template_path("react") == (tmp_path / "create-react").resolve()

    @pytest.mark.unit
    def test_template_path_unknown_framework(self):
        with pytest.raises(KeyError):
            GeneratorSettings().template_path("svelte")

    @pytest.mark.unit
    def test_save_load_roundtrip(self, tmp_path: Path):
        settings = GeneratorSettings(lockfile_name="pnpm-lock.yaml", package_manager="pnpm")
        loaded = GeneratorSettings.load(settings.save(tmp_path / "settings.json"))
        assert loaded.lockfile_name == "pnpm-lock.yaml"
        assert loaded.package_manager == "pnpm"


class TestGeneratorSettingsFromEnv:
    @pytest.mark.unit
    def test_empty_env(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = GeneratorSettings.from_env()
        assert settings == GeneratorSettings()

    @pytest.mark.unit
    def test_all_variables(self, tmp_path: Path):
        env = {
            "CARTO_CREATE_LOCKFILE": "package-lock.json",
            "CARTO_CREATE_PACKAGE_MANAGER": "npm",
            "CARTO_CREATE_TEMPLATES_ROOT": str(tmp_path),
            "CARTO_CREATE_VERBOSE": "true",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = GeneratorSettings.from_env()
        assert settings.lockfile_name == "package-lock.json"
        assert settings.package_manager == "npm"
        assert settings.templates_root == tmp_path
        assert settings.verbose is True

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["0", "false", "no", ""])
    def test_verbose_falsy(self, value: str):
        with patch.dict(os.environ, {"CARTO_CREATE_VERBOSE": value}, clear=True):
            assert GeneratorSettings.from_env().verbose is False
