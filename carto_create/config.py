"""carto-create configuration.

Typed settings for the generator.  ``TemplatePolicy`` describes what is
removed from, and rewritten in, a freshly copied template; it is data rather
than code so each template can ship its own variant as JSON.
``GeneratorSettings`` holds the knobs that are not tied to a template.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Template policy defaults
# ---------------------------------------------------------------------------

DEFAULT_EXCLUDE_PATHS: list[str] = [
    "node_modules",
    "dist",
    "scripts",
    ".angular",
    ".vscode",
    ".yarn",
    ".env.local",
    ".env.development",
]

DEFAULT_EXCLUDE_DEPENDENCIES: list[str] = ["@carto/create-common"]

# See https://docs.npmjs.com/cli/v10/configuring-npm/package-json
DEFAULT_EXCLUDE_MANIFEST_FIELDS: list[str] = [
    "author",
    "bin",
    "bugs",
    "description",
    "files",
    "homepage",
    "keywords",
    "license",
    "publishConfig",
    "repository",
    "version",
]

DEFAULT_UPDATE_PATHS: list[str] = [
    "index.html",  # react, vue, angular
    "src/context.ts",  # react, vue
    "src/main.{ts,tsx}",  # react
    "src/environments/environment.ts",  # angular
    "src/environments/environment.*.ts",  # angular
    ".env",  # react, vue
]

DEFAULT_ENV_TEMPLATE_PATTERNS: list[str] = [
    "**/.env.template",
    "**/environment.template.ts",
]

DEFAULT_FRAMEWORK_MARKERS: dict[str, str] = {
    "@angular/core": "angular",
    "vue": "vue",
    "react": "react",
}

DEFAULT_AUTH_DOMAIN = "auth.carto.com"


class TemplatePolicy(BaseModel):
    """Exclusion and rewrite rules applied to a copied template."""

    exclude_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATHS),
        description="Project-relative paths removed after copying",
    )
    exclude_dependencies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_DEPENDENCIES),
        description="Package names stripped from every dependency bucket",
    )
    exclude_manifest_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_MANIFEST_FIELDS),
        description="Top-level package.json keys deleted from the project",
    )
    update_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_UPDATE_PATHS),
        description="Glob patterns of files eligible for token substitution",
    )
    env_template_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENV_TEMPLATE_PATTERNS),
        description="Glob patterns of *.template files materialized in place",
    )
    stylesheet_import: str = Field(
        default="@carto/create-common/style.css",
        description="Stylesheet import rewritten to the local copy",
    )
    stylesheet_local: str = Field(default="./style.css")
    framework_markers: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_FRAMEWORK_MARKERS),
        description="Manifest dependency name -> framework name",
    )

    def stylesheet_destination(self, framework: str | None) -> Path:
        """Project-relative path where the local stylesheet is installed."""
        if framework == "angular":
            return Path("style.css")
        return Path("src") / "style.css"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "TemplatePolicy":
        """Load a policy from JSON; missing keys keep their defaults."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)


# ---------------------------------------------------------------------------
# Generator settings
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATE_DIRS: dict[str, str] = {
    "angular": "create-angular",
    "react": "create-react",
    "vue": "create-vue",
}


class GeneratorSettings(BaseModel):
    """Settings for the generator that do not depend on the template."""

    lockfile_name: str = Field(
        default="yarn.lock",
        description="Empty lockfile written at the project root",
    )
    package_manager: str = Field(default="yarn")
    templates_root: Path = Field(
        default=Path("./packages"),
        description="Directory holding one template per framework (CI only)",
    )
    template_dirs: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_TEMPLATE_DIRS)
    )
    verbose: bool = Field(default=False)

    def template_path(self, framework: str) -> Path:
        """Resolve the template directory for *framework*.

        Raises:
            KeyError: If the framework has no registered template.
        """
        return (self.templates_root / self.template_dirs[framework]).resolve()

    def save(self, path: Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorSettings":
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            CARTO_CREATE_LOCKFILE, CARTO_CREATE_PACKAGE_MANAGER,
            CARTO_CREATE_TEMPLATES_ROOT, CARTO_CREATE_VERBOSE.
        """
        kwargs: dict[str, object] = {}
        if os.environ.get("CARTO_CREATE_LOCKFILE"):
            kwargs["lockfile_name"] = os.environ["CARTO_CREATE_LOCKFILE"]
        if os.environ.get("CARTO_CREATE_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["CARTO_CREATE_PACKAGE_MANAGER"]
        if os.environ.get("CARTO_CREATE_TEMPLATES_ROOT"):
            kwargs["templates_root"] = Path(os.environ["CARTO_CREATE_TEMPLATES_ROOT"])
        verbose = os.environ.get("CARTO_CREATE_VERBOSE", "").strip().lower()
        kwargs["verbose"] = verbose in ("1", "true", "yes", "on")
        return cls(**kwargs)
