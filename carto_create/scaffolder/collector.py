"""Project configuration collection.

The questions asked while creating a project are described as an ordered
list of :class:`FieldSpec`.  A :class:`ConfigCollector` walks that list,
skipping fields whose ``when`` predicate rejects the answers given so far,
and returns a validated :class:`ProjectConfig`.

Two collectors are provided:

- :class:`PromptCollector` asks on the terminal through a rich ``Console``
  and re-asks until an answer is valid.
- :class:`ScriptedCollector` answers from a mapping and fails on the first
  invalid answer, for CI and other non-interactive use.
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape

from carto_create.config import DEFAULT_AUTH_DOMAIN
from carto_create.errors import CancellationError, ValidationError


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class ProjectConfig(BaseModel):
    """Answers driving the generation of one project.

    Aliases are the camelCase names used in template placeholders
    (``$title``, ``$accessToken``, ...).  Fields belonging to the
    authentication mode that is *not* selected are cleared on validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Project title, in sentence or title case")
    auth_enabled: bool = Field(
        default=False,
        alias="authEnabled",
        description="OAuth if true, access token otherwise",
    )
    access_token: str | None = Field(default=None, alias="accessToken")
    auth_client_id: str | None = Field(default=None, alias="authClientID")
    auth_organization_id: str | None = Field(default=None, alias="authOrganizationID")
    auth_domain: str | None = Field(default=None, alias="authDomain")

    @model_validator(mode="after")
    def _check_auth_fields(self) -> "ProjectConfig":
        if not self.title.strip():
            raise ValueError("Title is required")

        if self.auth_enabled:
            self.access_token = None
            if not (self.auth_client_id or "").strip():
                raise ValueError("Client ID is required when OAuth is enabled")
            if not self.auth_domain:
                self.auth_domain = DEFAULT_AUTH_DOMAIN
        else:
            self.auth_client_id = None
            self.auth_organization_id = None
            self.auth_domain = None
            if not (self.access_token or "").strip():
                raise ValueError("Access token is required when OAuth is disabled")
        return self

    @classmethod
    def from_answers(cls, answers: Mapping[str, Any]) -> "ProjectConfig":
        """Validate *answers* (keyed by alias or attribute name).

        Raises:
            ValidationError: If a required answer is missing or invalid.
        """
        try:
            return cls.model_validate(dict(answers))
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ()))
            message = first.get("msg", str(exc)).removeprefix("Value error, ")
            raise ValidationError(message, field=field) from exc

    def token_values(self) -> dict[str, str]:
        """Return ``{alias: text}`` for every stored field.

        Booleans are rendered the way the templates compare them
        (``'$authEnabled' === 'true'``).
        """
        values: dict[str, str] = {}
        for key, value in self.model_dump(by_alias=True, exclude_none=True).items():
            if isinstance(value, bool):
                values[key] = "true" if value else "false"
            else:
                values[key] = str(value)
        return values


# ---------------------------------------------------------------------------
# Field specifications
# ---------------------------------------------------------------------------


def _always(answers: Mapping[str, Any]) -> bool:
    return True


def _oauth(answers: Mapping[str, Any]) -> bool:
    return bool(answers.get("authEnabled"))


def _access_token(answers: Mapping[str, Any]) -> bool:
    return not answers.get("authEnabled")


_TRUTHY = {"y", "yes", "true", "1", "on"}
_FALSY = {"n", "no", "false", "0", "off"}


@dataclass(frozen=True)
class FieldSpec:
    """One question of the configuration flow."""

    name: str
    attribute: str
    kind: str  # "text" | "password" | "toggle"
    message: str
    required: bool = False
    when: Callable[[Mapping[str, Any]], bool] = _always
    default: Any = None
    error: str = ""
    active: str = "yes"
    inactive: str = "no"
    hint: str = ""

    def coerce(self, value: Any) -> Any:
        """Normalise a raw answer; unparseable toggles become ``None``."""
        if self.kind == "toggle":
            if isinstance(value, bool):
                return value
            text = "" if value is None else str(value).strip().lower()
            if not text:
                return bool(self.default)
            if text in _TRUTHY or text == self.active.lower():
                return True
            if text in _FALSY or text == self.inactive.lower():
                return False
            return None

        if value is None or (isinstance(value, str) and not value.strip()):
            return self.default if self.default is not None else ""
        return str(value)

    def validate(self, value: Any) -> str | None:
        """Return an error message for *value*, or ``None`` if it is valid."""
        if self.kind == "toggle":
            if value is None:
                return f"Answer '{self.active}' or '{self.inactive}'"
            return None
        if self.required and not str(value).strip():
            return self.error or f"{self.name} is required"
        return None


PROJECT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(
        name="title",
        attribute="title",
        kind="text",
        message="Project title",
        required=True,
        error="Title is required",
        hint="(required) [.env, index.html]",
    ),
    FieldSpec(
        name="authEnabled",
        attribute="auth_enabled",
        kind="toggle",
        message="Authentication?",
        default=False,
        active="OAuth",
        inactive="access token",
        hint="(required) [.env]",
    ),
    FieldSpec(
        name="accessToken",
        attribute="access_token",
        kind="password",
        message="Access token for CARTO API",
        required=True,
        when=_access_token,
        error="Access token is required",
        hint="(required) [.env]",
    ),
    FieldSpec(
        name="authClientID",
        attribute="auth_client_id",
        kind="password",
        message="OAuth client ID",
        required=True,
        when=_oauth,
        error="Client ID is required",
        hint="(required) [.env]",
    ),
    FieldSpec(
        name="authOrganizationID",
        attribute="auth_organization_id",
        kind="text",
        message="OAuth organization ID",
        when=_oauth,
        hint="(optional) [.env]",
    ),
    FieldSpec(
        name="authDomain",
        attribute="auth_domain",
        kind="text",
        message="OAuth domain",
        when=_oauth,
        default=DEFAULT_AUTH_DOMAIN,
        hint="(optional) [.env]",
    ),
)


# ---------------------------------------------------------------------------
# Collectors
# ---------------------------------------------------------------------------


class ConfigCollector(abc.ABC):
    """Walks a list of :class:`FieldSpec` and builds a :class:`ProjectConfig`."""

    def collect(self, fields: tuple[FieldSpec, ...] = PROJECT_FIELDS) -> ProjectConfig:
        """Ask every applicable field in order.

        Raises:
            CancellationError: If the user aborts.
            ValidationError: If an answer is invalid and cannot be re-asked.
        """
        answers: dict[str, Any] = {}
        for spec in fields:
            if not spec.when(answers):
                continue
            answers[spec.name] = self._answer(spec, answers)
        return ProjectConfig.from_answers(answers)

    def _answer(self, spec: FieldSpec, answers: Mapping[str, Any]) -> Any:
        while True:
            value = spec.coerce(self.ask(spec, answers))
            error = spec.validate(value)
            if error is None:
                return value
            self.on_invalid(spec, error)

    @abc.abstractmethod
    def ask(self, spec: FieldSpec, answers: Mapping[str, Any]) -> Any:
        """Return the raw answer for *spec*."""

    @abc.abstractmethod
    def confirm(self, message: str) -> bool:
        """Return ``True`` if the user accepts *message*."""

    def on_invalid(self, spec: FieldSpec, message: str) -> None:
        raise ValidationError(message, field=spec.name)


class PromptCollector(ConfigCollector):
    """Interactive collector reading answers from the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def ask(self, spec: FieldSpec, answers: Mapping[str, Any]) -> Any:
        prompt = f"[bold]{escape(spec.message)}[/bold]"
        if spec.hint:
            prompt += f" [dim]{escape(spec.hint)}[/dim]"
        if spec.kind == "toggle":
            prompt += f" [cyan]({escape(spec.inactive)} / {escape(spec.active)})[/cyan]"
        elif spec.default is not None:
            prompt += f" [dim]({escape(str(spec.default))})[/dim]"
        prompt += " › "

        try:
            return self.console.input(prompt, password=spec.kind == "password")
        except (KeyboardInterrupt, EOFError) as exc:
            self.console.print()
            raise CancellationError() from exc

    def confirm(self, message: str) -> bool:
        try:
            response = self.console.input(f"[bold]{escape(message)}[/bold] [dim](y/N)[/dim] › ")
        except (KeyboardInterrupt, EOFError) as exc:
            self.console.print()
            raise CancellationError() from exc
        return response.strip().lower() in ("y", "yes")

    def on_invalid(self, spec: FieldSpec, message: str) -> None:
        self.console.print(f"[bold red]✖ {escape(message)}[/bold red]")


class ScriptedCollector(ConfigCollector):
    """Non-interactive collector answering from a mapping.

    Answers may be keyed by placeholder name (``accessToken``) or by
    attribute name (``access_token``).  ``overwrite`` is the answer given
    when asked to clear a non-empty project directory.
    """

    def __init__(self, answers: Mapping[str, Any], overwrite: bool = False) -> None:
        self.answers = dict(answers)
        self.overwrite = overwrite

    def ask(self, spec: FieldSpec, answers: Mapping[str, Any]) -> Any:
        if spec.name in self.answers:
            return self.answers[spec.name]
        return self.answers.get(spec.attribute)

    def confirm(self, message: str) -> bool:
        return self.overwrite
