"""Command-line entry points.

``carto-create TEMPLATE_DIR [TARGET_DIR]`` creates a project, asking for
its configuration on the terminal unless ``--non-interactive`` is given.

``carto-create-ci FRAMEWORK PROJECT_PATH ACCESS_TOKEN`` creates a test
project for one of the bundled templates without any prompt.

Exit codes: 0 on success, 2 when the user cancels, 1 on any other error.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from rich.markup import escape

from carto_create import __version__
from carto_create.config import GeneratorSettings, TemplatePolicy
from carto_create.errors import CancellationError, CreateError, FilesystemError
from carto_create.scaffolder import (
    ProjectConfig,
    ProjectGenerator,
    PromptCollector,
    ScriptedCollector,
)
from carto_create.utils import console, print_error, print_success, print_warning

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 2


# ---------------------------------------------------------------------------
# carto-create
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carto-create",
        description="Create a new CARTO app from a template directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  carto-create ./packages/create-react my-app\n"
            "  carto-create ./packages/create-vue . --non-interactive \\\n"
            "      --title 'My App' --access-token $CARTO_TOKEN\n"
        ),
    )
    parser.add_argument("template", help="Path to the template directory")
    parser.add_argument(
        "target",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )
    parser.add_argument(
        "--policy",
        type=Path,
        default=None,
        help="JSON file overriding the template exclusion/update policy",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Take the configuration from options instead of prompting",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Overwrite a non-empty project directory (non-interactive only)",
    )
    parser.add_argument("--title", default=None, help="Project title")
    parser.add_argument("--access-token", default=None, help="CARTO API access token")
    parser.add_argument("--oauth", action="store_true", help="Use OAuth instead of an access token")
    parser.add_argument("--client-id", default=None, help="OAuth client ID")
    parser.add_argument("--organization-id", default=None, help="OAuth organization ID")
    parser.add_argument("--auth-domain", default=None, help="OAuth domain")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print each generation step")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _answers_from_args(args: argparse.Namespace) -> dict[str, Any]:
    answers: dict[str, Any] = {"authEnabled": args.oauth}
    optional = {
        "title": args.title,
        "accessToken": args.access_token,
        "authClientID": args.client_id,
        "authOrganizationID": args.organization_id,
        "authDomain": args.auth_domain,
    }
    answers.update({key: value for key, value in optional.items() if value is not None})
    return answers


def run(argv: list[str] | None = None) -> int:
    """Run ``carto-create`` and return its exit code."""
    args = build_parser().parse_args(argv)

    settings = GeneratorSettings.from_env()
    if args.verbose:
        settings.verbose = True

    try:
        policy = TemplatePolicy.load(args.policy) if args.policy else TemplatePolicy()
    except (OSError, PydanticValidationError) as exc:
        print_error(f"Error: invalid policy file {args.policy}: {exc}")
        return EXIT_ERROR

    if args.non_interactive:
        collector = ScriptedCollector(_answers_from_args(args), overwrite=args.yes)
    else:
        collector = PromptCollector(console)

    generator = ProjectGenerator(args.template, policy=policy, settings=settings)
    return _run_generation(generator.create_project(args.target, collector))


def main() -> None:
    """Entry point for ``carto-create``."""
    sys.exit(run())


# ---------------------------------------------------------------------------
# carto-create-ci
# ---------------------------------------------------------------------------


def build_ci_parser(settings: GeneratorSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="carto-create-ci",
        description=(
            "Generate a test project in CI: given a template name, a target "
            "project path and an access token, create the project without "
            "user interaction."
        ),
    )
    parser.add_argument("framework", choices=sorted(settings.template_dirs))
    parser.add_argument("project_path", help="Project directory to create")
    parser.add_argument("access_token", help="CARTO API access token")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def run_ci(argv: list[str] | None = None) -> int:
    """Run ``carto-create-ci`` and return its exit code."""
    settings = GeneratorSettings.from_env()
    args = build_ci_parser(settings).parse_args(argv)
    if args.verbose:
        settings.verbose = True

    try:
        config = ProjectConfig.from_answers({
            "title": f"CI Test ({args.framework})",
            "authEnabled": False,
            "accessToken": args.access_token,
        })
    except CreateError as exc:
        print_error(f"Error: {exc}")
        return EXIT_ERROR

    generator = ProjectGenerator(settings.template_path(args.framework), settings=settings)
    code = _run_generation(
        generator.create_project_from_config(Path(args.project_path), config)
    )
    if code == EXIT_OK:
        print_success(f'Project "{config.title}" was created in {args.project_path}')
    return code


def ci_main() -> None:
    """Entry point for ``carto-create-ci``."""
    sys.exit(run_ci())


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


def _run_generation(coro: Any) -> int:
    try:
        asyncio.run(coro)
    except CancellationError as exc:
        print_warning(str(exc))
        return EXIT_CANCELLED
    except FilesystemError as exc:
        print_error(f"Error: {exc}")
        if exc.path is not None:
            console.print(f"[dim]Path: {escape(str(exc.path))}[/dim]", highlight=False)
        return EXIT_ERROR
    except CreateError as exc:
        print_error(f"Error: {exc}")
        return EXIT_ERROR
    return EXIT_OK


if __name__ == "__main__":
    main()
