"""Rich output formatting helpers for the lockwright CLI.

Provides consistent terminal output for lock outcomes, lockfile contents,
resolution conflicts and errors.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from lockwright.core.dependency import manifest_set
from lockwright.core.dependency.resolver import Resolution
from lockwright.core.project import LockOutcome, LockStatus

console = Console()
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")


def print_conflicts(conflicts: list[str]) -> None:
    """Print the conflicts that made a resolution fail."""
    console.print(
        Panel("[bold red]Could not resolve the dependencies[/bold red]",
              title="Dependency Resolution")
    )
    for conflict in conflicts:
        console.print(f"  [red]-[/red] {conflict}")


def print_changes(changes: dict[str, Any]) -> None:
    """Print a manifest diff produced by ``lockfile.diff``."""
    for name in changes["added"]:
        console.print(f"  [green]+[/green] {name}")
    for name in changes["removed"]:
        console.print(f"  [red]-[/red] {name}")
    for change in changes["changed"]:
        console.print(
            f"  [yellow]~[/yellow] {change['name']} {change['old']} -> {change['new']}"
        )


def print_outcome(outcome: LockOutcome, lockfile_name: str) -> None:
    """Print the result of a resolve or update workflow."""
    if outcome.status is LockStatus.UNCHANGED:
        console.print(f"[dim]{lockfile_name} is up to date.[/dim]")
    elif outcome.status is LockStatus.UNRESOLVED:
        print_conflicts(outcome.resolution.conflicts)
    else:
        count = len(outcome.resolution.manifests or ())
        console.print(
            f"[bold green]Resolved {count} package(s)[/bold green]; wrote {lockfile_name}"
        )
        if outcome.changes:
            print_changes(outcome.changes)


def print_lock(resolution: Resolution) -> None:
    """Print the top-level dependencies and manifests of a lock."""
    deps = Table(title="Dependencies", show_header=True, header_style="bold")
    deps.add_column("Name", style="bold")
    deps.add_column("Requirement")
    deps.add_column("Source", style="dim")
    for dep in sorted(resolution.dependencies, key=lambda d: d.name):
        deps.add_row(dep.name, dep.requirement.canonical, str(dep.source))
    console.print(deps)

    table = Table(title="Locked Packages", show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Version")
    table.add_column("Depends On")
    table.add_column("Source", style="dim")
    for m in manifest_set.sort(resolution.require_correct()):
        table.add_row(
            m.name,
            str(m.version),
            ", ".join(f"{d.name} ({d.requirement})" for d in m.dependencies) or "-",
            str(m.source),
        )
    console.print(table)
