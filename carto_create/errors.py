"""Exceptions raised while creating a project.

Every error derives from :class:`CreateError` so the CLI can map the whole
family onto exit codes.  Cancellation is kept distinct because it is a user
decision rather than a failure.
"""

from __future__ import annotations

from pathlib import Path


class CreateError(Exception):
    """Base class for all project-creation errors."""

    exit_code: int = 1


class ConfigurationError(CreateError):
    """Raised when template and target directories are misconfigured."""


class ValidationError(CreateError):
    """Raised when a configuration answer is missing or invalid."""

    def __init__(self, message: str, field: str = ""):
        self.field = field
        super().__init__(message)


class CancellationError(CreateError):
    """Raised when the user declines to continue."""

    exit_code = 2

    def __init__(self, message: str = "Project creation cancelled."):
        super().__init__(message)


class FilesystemError(CreateError):
    """Raised when a file operation fails during generation."""

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        step: str = "",
    ):
        self.path = Path(path) if path is not None else None
        self.step = step
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.step:
            message = f"[{self.step}] {message}"
        return message


class ManifestParseError(CreateError):
    """Raised when ``package.json`` is not a well-formed JSON object."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)
