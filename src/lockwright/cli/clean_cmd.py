"""``lockwright clean``: Remove the cache, installed packages and lockfile."""

from __future__ import annotations

import click

from lockwright.cli.context import load_project
from lockwright.cli.output import console


@click.command("clean")
@click.pass_context
def clean_command(ctx: click.Context) -> None:
    """Delete the cache directory, installed packages and the lockfile."""
    project = load_project(ctx)
    project.clean()
    console.print("[dim]Cleaned.[/dim]")
