"""Project creation orchestrator.

Creates a new CARTO app from a template directory:

1. resolve and check the template/target directories,
2. confirm before touching a non-empty target,
3. collect the project configuration,
4. run the generation pipeline (copy, exclude, manifest, stylesheet,
   materialize, substitute, lockfile),
5. print the next steps.

The pipeline is a fixed, ordered tuple of steps so that exclusion always
happens before globbing and templates are materialized before tokens are
substituted.  There is no rollback: a failure leaves a partially generated
project, and existing directories are only cleared after explicit
confirmation.
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from carto_create import utils
from carto_create.config import GeneratorSettings, TemplatePolicy
from carto_create.errors import (
    CancellationError,
    ConfigurationError,
    FilesystemError,
)

from . import disk, manifest, tokens
from .collector import ConfigCollector, ProjectConfig, PromptCollector
from .report import ReportRenderer

MANIFEST_NAME = "package.json"

DEFAULT_STYLESHEET = Path(__file__).resolve().parent.parent / "assets" / "style.css"


@dataclass
class NextStep:
    command: str
    note: str = ""


@dataclass
class GenerationResult:
    """What a generation run produced."""

    project_dir: Path
    config: ProjectConfig
    framework: str | None = None
    cleared: list[Path] = field(default_factory=list)
    excluded: list[Path] = field(default_factory=list)
    stylesheet: Path | None = None
    materialized: list[Path] = field(default_factory=list)
    updated: list[Path] = field(default_factory=list)
    lockfile: Path | None = None
    steps: list[str] = field(default_factory=list)


Step = Callable[[GenerationResult], Awaitable[None]]


class ProjectGenerator:
    """Creates projects from one template directory.

    Args:
        template_dir: Template (source) directory; never written to.
        policy: Exclusion and rewrite rules.  Defaults to the standard
            CARTO template policy.
        settings: Generator settings (lockfile name, package manager, ...).
        console: Rich console used for all output.
        stylesheet: Stylesheet copied into every project.
    """

    def __init__(
        self,
        template_dir: str | Path,
        policy: TemplatePolicy | None = None,
        settings: GeneratorSettings | None = None,
        console: Console | None = None,
        stylesheet: str | Path | None = None,
    ) -> None:
        self.template_dir = utils.resolve_dir(template_dir)
        self.policy = policy or TemplatePolicy()
        self.settings = settings or GeneratorSettings()
        self.console = console or utils.console
        self.stylesheet = Path(stylesheet) if stylesheet else DEFAULT_STYLESHEET
        self.renderer = ReportRenderer()

    # -- Public API --------------------------------------------------------

    async def create_project(
        self,
        target_dir: str | Path = ".",
        collector: ConfigCollector | None = None,
        cwd: str | Path | None = None,
    ) -> GenerationResult:
        """Ask for the configuration, then create the project in *target_dir*.

        *target_dir* is resolved against *cwd* (default: the process cwd).

        Raises:
            ConfigurationError: If target and template directories overlap.
            CancellationError: If the user declines to overwrite or aborts
                the prompts.  No existing file has been removed.
            ValidationError: If the configuration is invalid.
        """
        collector = collector or PromptCollector(self.console)
        project_dir = utils.resolve_dir(target_dir, cwd)
        self.check_directories(project_dir)

        self.console.print(
            self.renderer.render(
                "directories.txt.j2",
                {"template_dir": self.template_dir, "project_dir": project_dir},
            )
        )

        needs_clear = await self._prepare_target(project_dir, collector)

        config = collector.collect()

        # Overwrite was explicitly approved above.
        cleared: list[Path] = []
        if needs_clear:
            self._trace("clear", str(project_dir))
            cleared = await disk.empty_dir(project_dir)

        result = await self.create_project_from_config(project_dir, config)
        result.cleared = cleared

        self.print_next_steps(config, target_dir)
        return result

    async def create_project_from_config(
        self, project_dir: str | Path, config: ProjectConfig
    ) -> GenerationResult:
        """Generate the project without any user interaction.

        *project_dir* is expected to be empty or missing; existing files
        with the same names as template files are overwritten.
        """
        project_path = utils.resolve_dir(project_dir)
        self.check_directories(project_path)

        result = GenerationResult(project_dir=project_path, config=config)
        for name, step in self._pipeline():
            self._trace(name)
            try:
                await step(result)
            except FilesystemError as exc:
                if not exc.step:
                    exc.step = name
                raise
            result.steps.append(name)

        if self.settings.verbose:
            self.print_summary(result)
        return result

    def check_directories(self, project_dir: Path) -> None:
        """Fail before any I/O if *project_dir* cannot receive the template."""
        template_dir = self.template_dir
        if project_dir == template_dir:
            raise ConfigurationError("Target and template directories cannot be the same.")
        if template_dir in project_dir.parents:
            raise ConfigurationError(
                f"Target directory {project_dir} is inside the template directory."
            )
        if project_dir in template_dir.parents:
            raise ConfigurationError(
                f"Template directory {template_dir} is inside the target directory."
            )
        if not template_dir.is_dir():
            raise ConfigurationError(f"Template directory not found: {template_dir}")
        if not (template_dir / MANIFEST_NAME).is_file():
            raise ConfigurationError(
                f"Template directory {template_dir} has no {MANIFEST_NAME}."
            )
        if project_dir.exists() and not project_dir.is_dir():
            raise ConfigurationError(f"Target {project_dir} exists and is not a directory.")

    def next_steps(self, input_dir: str | Path = ".") -> list[NextStep]:
        """Commands suggested once the project exists."""
        pm = self.settings.package_manager
        steps: list[NextStep] = []
        if str(input_dir) != ".":
            steps.append(NextStep(f"cd {input_dir}"))
        steps.extend([
            NextStep(pm),
            NextStep(f"{pm} dev"),
            NextStep(f"{pm} dev:ssl", "required for OAuth"),
        ])
        return steps

    def print_next_steps(self, config: ProjectConfig, input_dir: str | Path = ".") -> None:
        self.console.print(
            self.renderer.render(
                "next_steps.txt.j2",
                {"title": config.title, "steps": self.next_steps(input_dir)},
            )
        )

    def print_summary(self, result: GenerationResult) -> None:
        """Print what the pipeline did, with paths relative to the project."""

        def rel(paths: list[Path]) -> str:
            names = [str(utils.relative_to_or_self(p, result.project_dir)) for p in paths]
            return ", ".join(names) or "-"

        utils.print_summary_table(
            {
                "Project": str(result.project_dir),
                "Framework": result.framework or "unknown",
                "Excluded": rel(result.excluded),
                "Stylesheet": rel([result.stylesheet] if result.stylesheet else []),
                "Templates": rel(result.materialized),
                "Updated": rel(result.updated),
                "Lockfile": rel([result.lockfile] if result.lockfile else []),
            },
            title="Generation summary",
            out=self.console,
        )

    # -- Target preparation ------------------------------------------------

    async def _prepare_target(self, project_dir: Path, collector: ConfigCollector) -> bool:
        """Create a missing target or confirm overwriting a non-empty one.

        Returns:
            ``True`` if the target must be cleared once configuration is
            complete.
        """
        if not project_dir.exists():
            self._trace("mkdir", str(project_dir))
            await disk.make_dir(project_dir)
            return False

        if await disk.is_empty(project_dir):
            return False

        if not collector.confirm(f'Project directory "{project_dir}" is not empty. Overwrite?'):
            raise CancellationError()
        return True

    # -- Pipeline ----------------------------------------------------------

    def _pipeline(self) -> tuple[tuple[str, Step], ...]:
        return (
            ("copy", self._copy_template),
            ("exclude", self._exclude_paths),
            ("manifest", self._update_manifest),
            ("stylesheet", self._install_stylesheet),
            ("materialize", self._materialize_templates),
            ("substitute", self._substitute_tokens),
            ("lockfile", self._write_lockfile),
        )

    async def _copy_template(self, result: GenerationResult) -> None:
        await disk.copy_dir(self.template_dir, result.project_dir)

    async def _exclude_paths(self, result: GenerationResult) -> None:
        for rel in self.policy.exclude_paths:
            path = _inside(result.project_dir, rel)
            if await disk.remove_path(path):
                result.excluded.append(path)

    async def _update_manifest(self, result: GenerationResult) -> None:
        path = result.project_dir / MANIFEST_NAME
        original = manifest.load_manifest(path)
        result.framework = manifest.detect_framework(original, self.policy.framework_markers)
        updated = manifest.transform_manifest(original, self.policy, result.config.title)
        manifest.write_manifest(path, updated)

    async def _install_stylesheet(self, result: GenerationResult) -> None:
        # Target of the rewritten stylesheet import.
        destination = result.project_dir / self.policy.stylesheet_destination(result.framework)
        await disk.make_dir(destination.parent)
        await disk.copy(self.stylesheet, destination)
        result.stylesheet = destination

    async def _materialize_templates(self, result: GenerationResult) -> None:
        result.materialized = await tokens.materialize_templates(
            result.project_dir, self.policy.env_template_patterns
        )

    async def _substitute_tokens(self, result: GenerationResult) -> None:
        token_list = tokens.create_token_list(result.config, self.policy)
        result.updated = await tokens.apply_tokens(
            result.project_dir, self.policy.update_paths, token_list
        )

    async def _write_lockfile(self, result: GenerationResult) -> None:
        # Empty lockfile marks the project root for the package manager.
        lockfile = result.project_dir / self.settings.lockfile_name
        await disk.write_text(lockfile, "")
        result.lockfile = lockfile

    # -- Output ------------------------------------------------------------

    def _trace(self, step: str, detail: str = "") -> None:
        if self.settings.verbose:
            utils.print_step(step, detail, self.console)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _inside(root: Path, rel: str) -> Path:
    """Join *rel* onto *root*, refusing paths that do not lie below *root*.

    The check is lexical so symlinks inside the project are removed, not
    followed.
    """
    path = Path(os.path.normpath(root / rel))
    if root not in path.parents:
        raise ConfigurationError(f"Excluded path {rel!r} is outside the project directory.")
    return path
