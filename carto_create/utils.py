"""Shared helpers for carto-create.

Rich-based console output and a couple of path helpers.  All user-facing
text goes through the module-level ``console`` so tests can swap it for a
recording console.
"""

from __future__ import annotations

import os
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def resolve_dir(path: str | Path, cwd: str | Path | None = None) -> Path:
    """Resolve *path* against *cwd* (default: the process cwd).

    Symlinks are resolved too, so two spellings of the same directory
    compare equal.
    """
    base = Path(cwd) if cwd is not None else Path(os.getcwd())
    return (base / Path(path)).resolve()


def relative_to_or_self(path: Path, root: Path) -> Path:
    """Return *path* relative to *root* when possible, else *path*."""
    try:
        return path.relative_to(root)
    except ValueError:
        return path


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str, out: Console | None = None) -> None:
    """Print a green success message."""
    (out or console).print(f"[bold green]✔[/bold green] [bold]{escape(message)}[/bold]")


def print_error(message: str, out: Console | None = None) -> None:
    """Print a red error message."""
    (out or console).print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str, out: Console | None = None) -> None:
    """Print a yellow warning message."""
    (out or console).print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_step(step: str, detail: str = "", out: Console | None = None) -> None:
    """Print a dim progress line for a generation step."""
    suffix = f" [dim]…[/dim] {escape(detail)}" if detail else ""
    (out or console).print(f"[dim]{step}[/dim]{suffix}")


def print_summary_table(
    data: dict[str, str],
    title: str = "Summary",
    out: Console | None = None,
) -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    target = out or console
    target.print(table)
    target.print()
