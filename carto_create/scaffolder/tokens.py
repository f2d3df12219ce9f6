"""Token substitution in copied template files.

A token is a ``(placeholder, value)`` pair such as ``("$title", "Demo")``.
Tokens are replaced literally, in a single pass, in every file matched by the
template policy's update globs.  Before that, ``*.template`` files are
materialized over their non-template siblings so they get substituted too.
"""

from __future__ import annotations

import asyncio
import re
import shutil
from collections.abc import Iterable, Sequence
from pathlib import Path

from carto_create.config import TemplatePolicy
from carto_create.errors import FilesystemError

from .collector import ProjectConfig

Token = tuple[str, str]

TEMPLATE_SUFFIX = ".template"

_BRACES = re.compile(r"\{([^{}]*)\}")


def create_token_list(config: ProjectConfig, policy: TemplatePolicy) -> list[Token]:
    """Build the tokens for *config*, plus the stylesheet import rewrite.

    Only fields stored on *config* produce tokens, so placeholders of the
    unused authentication mode are left as they are.  Longer placeholders
    come first so none is shadowed by a shorter one sharing its prefix.
    """
    tokens: list[Token] = [
        (f"${key}", value) for key, value in config.token_values().items()
    ]
    tokens.sort(key=lambda token: len(token[0]), reverse=True)
    tokens.append((policy.stylesheet_import, policy.stylesheet_local))
    return tokens


def replace_tokens(content: str, tokens: Iterable[Token]) -> str:
    """Replace every placeholder in one pass; substituted values are not rescanned."""
    values: dict[str, str] = {}
    for placeholder, value in tokens:
        if placeholder:
            values.setdefault(placeholder, value)
    if not values:
        return content
    pattern = re.compile(
        "|".join(re.escape(p) for p in sorted(values, key=len, reverse=True))
    )
    return pattern.sub(lambda match: values[match.group(0)], content)


async def update_template(path: str | Path, tokens: Sequence[Token]) -> None:
    """Replace every token in the text file at *path*, in place."""
    await asyncio.to_thread(_update_file, Path(path), list(tokens))


# ---------------------------------------------------------------------------
# Globbing
# ---------------------------------------------------------------------------


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives in a glob pattern.

    Examples::

        expand_braces("src/main.{ts,tsx}") -> ["src/main.ts", "src/main.tsx"]
        expand_braces("index.html") -> ["index.html"]
    """
    match = _BRACES.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def glob_files(root: str | Path, patterns: Iterable[str]) -> list[Path]:
    """Return absolute, deduplicated, sorted files under *root* matching *patterns*."""
    root_path = Path(root).resolve()
    found: set[Path] = set()
    for pattern in patterns:
        for expanded in expand_braces(pattern):
            for match in root_path.glob(expanded):
                if match.is_file():
                    found.add(match.resolve())
    return sorted(found)


def resolve_update_paths(project_dir: str | Path, patterns: Iterable[str]) -> list[Path]:
    """Files eligible for token substitution.

    Must be evaluated after exclusion so removed files are never touched.
    """
    return glob_files(project_dir, patterns)


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


def materialized_path(template_path: Path) -> Path:
    """``.env.template`` -> ``.env``; ``environment.template.ts`` -> ``environment.ts``."""
    return template_path.with_name(template_path.name.replace(TEMPLATE_SUFFIX, "", 1))


async def materialize_templates(
    project_dir: str | Path, patterns: Iterable[str]
) -> list[Path]:
    """Copy each matching template over its sibling, then delete the template.

    Returns:
        The materialized (non-template) paths.
    """
    materialized: list[Path] = []
    for template_path in glob_files(project_dir, patterns):
        target = materialized_path(template_path)
        if target == template_path:
            continue
        await asyncio.to_thread(_replace_with_template, template_path, target)
        materialized.append(target)
    return materialized


async def apply_tokens(
    project_dir: str | Path, patterns: Iterable[str], tokens: Sequence[Token]
) -> list[Path]:
    """Substitute *tokens* in every file matching *patterns*.

    Returns:
        The updated paths.
    """
    paths = resolve_update_paths(project_dir, patterns)
    for path in paths:
        await update_template(path, tokens)
    return paths


# ---------------------------------------------------------------------------
# Synchronous helpers
# ---------------------------------------------------------------------------


def _update_file(path: Path, tokens: list[Token]) -> None:
    # newline="" keeps the file's own line endings.
    try:
        with open(path, encoding="utf-8", newline="") as fh:
            content = fh.read()
    except UnicodeDecodeError as exc:
        raise FilesystemError(f"Cannot substitute tokens in non-text file {path}", path=path) from exc
    except OSError as exc:
        raise FilesystemError(f"Cannot read {path}: {exc}", path=path) from exc

    updated = replace_tokens(content, tokens)
    if updated == content:
        return
    try:
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(updated)
    except OSError as exc:
        raise FilesystemError(f"Cannot write {path}: {exc}", path=path) from exc


def _replace_with_template(template_path: Path, target: Path) -> None:
    try:
        shutil.copyfile(template_path, target)
        template_path.unlink()
    except OSError as exc:
        raise FilesystemError(
            f"Cannot materialize {template_path}: {exc}", path=template_path
        ) from exc
