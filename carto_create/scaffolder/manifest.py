"""``package.json`` transforms.

The manifest is handled as a plain ``dict`` parsed from JSON.  Every
transform returns a new dict and leaves its input untouched; the
orchestrator composes them with :func:`transform_manifest` and serialises
the result once.
"""

from __future__ import annotations

import copy
import json
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from carto_create.config import TemplatePolicy
from carto_create.errors import FilesystemError, ManifestParseError

Manifest = dict[str, Any]

DEPENDENCY_TYPES: tuple[str, ...] = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
    "peerDependencies",
)

# Same grammar as create-vite uses for package names.
_VALID_PKG_NAME = re.compile(
    r"^(?:@[a-z\d\-*~][a-z\d\-*._~]*/)?[a-z\d\-~][a-z\d\-._~]*$"
)

FALLBACK_PACKAGE_NAME = "carto-app"


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


def is_valid_package_name(name: str) -> bool:
    return _VALID_PKG_NAME.match(name) is not None


def to_valid_package_name(title: str) -> str:
    """Derive a legal npm package name from a human project title.

    Titles that are already legal are returned unchanged.

    Examples::

        to_valid_package_name("My App!") -> "my-app"
        to_valid_package_name("valid-name") -> "valid-name"
        to_valid_package_name("_") -> "carto-app"
    """
    if is_valid_package_name(title):
        return title

    name = title.strip().lower()
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"^[._]", "", name)
    name = re.sub(r"[^a-z\d\-~]+", "-", name)
    # Trailing separators left by stripped punctuation, unless nothing else is left.
    name = name.rstrip("-") or name
    if not is_valid_package_name(name):
        return FALLBACK_PACKAGE_NAME
    return name


# ---------------------------------------------------------------------------
# Pure transforms
# ---------------------------------------------------------------------------


def remove_dependencies(manifest: Mapping[str, Any], names: Iterable[str]) -> Manifest:
    """Drop *names* from every dependency bucket present in *manifest*."""
    result = copy.deepcopy(dict(manifest))
    excluded = set(names)
    for dep_type in DEPENDENCY_TYPES:
        bucket = result.get(dep_type)
        if not isinstance(bucket, dict):
            continue
        result[dep_type] = {
            name: version for name, version in bucket.items() if name not in excluded
        }
    return result


def remove_fields(manifest: Mapping[str, Any], fields: Iterable[str]) -> Manifest:
    """Drop top-level *fields* from *manifest*; absent fields are ignored."""
    excluded = set(fields)
    return {
        key: copy.deepcopy(value)
        for key, value in manifest.items()
        if key not in excluded
    }


def with_name(manifest: Mapping[str, Any], name: str) -> Manifest:
    result = copy.deepcopy(dict(manifest))
    result["name"] = name
    return result


def with_private(manifest: Mapping[str, Any], private: bool = True) -> Manifest:
    result = copy.deepcopy(dict(manifest))
    result["private"] = private
    return result


def detect_framework(
    manifest: Mapping[str, Any], markers: Mapping[str, str]
) -> str | None:
    """Return the framework whose marker dependency appears first in *markers*."""
    dependencies = manifest.get("dependencies")
    if not isinstance(dependencies, dict):
        return None
    for dependency, framework in markers.items():
        if dependency in dependencies:
            return framework
    return None


def transform_manifest(
    manifest: Mapping[str, Any], policy: TemplatePolicy, title: str
) -> Manifest:
    """Apply the project manifest rules of *policy* for a project titled *title*."""
    result = remove_dependencies(manifest, policy.exclude_dependencies)
    result = remove_fields(result, policy.exclude_manifest_fields)
    result = with_name(result, to_valid_package_name(title))
    return with_private(result, True)


# ---------------------------------------------------------------------------
# I/O
# ---------------------------------------------------------------------------


def load_manifest(path: str | Path) -> Manifest:
    """Read and parse ``package.json``.

    Raises:
        FilesystemError: If the file cannot be read.
        ManifestParseError: If the content is not a JSON object.
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"Cannot read manifest {file_path}: {exc}", path=file_path) from exc
    except UnicodeDecodeError as exc:
        raise ManifestParseError(f"Manifest {file_path} is not UTF-8 text", path=file_path) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(
            f"Manifest {file_path} is not valid JSON: {exc.msg} "
            f"(line {exc.lineno}, column {exc.colno})",
            path=file_path,
        ) from exc

    if not isinstance(data, dict):
        raise ManifestParseError(
            f"Manifest {file_path} must contain a JSON object, got {type(data).__name__}",
            path=file_path,
        )
    return data


def dump_manifest(manifest: Mapping[str, Any]) -> str:
    """Serialise *manifest* with 2-space indentation, preserving key order."""
    return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"


def write_manifest(path: str | Path, manifest: Mapping[str, Any]) -> None:
    file_path = Path(path)
    try:
        file_path.write_text(dump_manifest(manifest), encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"Cannot write manifest {file_path}: {exc}", path=file_path) from exc
