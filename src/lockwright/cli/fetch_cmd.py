"""``lockwright fetch``: Resolve and cache every locked package."""

from __future__ import annotations

import sys

import click

from lockwright.cli.context import load_project
from lockwright.cli.output import console, print_error
from lockwright.exceptions import LockwrightError


@click.command("fetch")
@click.pass_context
def fetch_command(ctx: click.Context) -> None:
    """Resolve if needed, then cache all locked packages from their sources."""
    project = load_project(ctx)
    try:
        resolution = project.fetch()
    except LockwrightError as exc:
        print_error(str(exc))
        sys.exit(1)
    count = len(resolution.manifests or ())
    console.print(f"[bold green]Cached {count} package(s)[/bold green]")
