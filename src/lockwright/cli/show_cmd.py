"""``lockwright show``: Display the current lockfile."""

from __future__ import annotations

import sys

import click

from lockwright.cli.context import load_project
from lockwright.cli.output import print_error, print_lock
from lockwright.exceptions import LockwrightError


@click.command("show")
@click.pass_context
def show_command(ctx: click.Context) -> None:
    """Show the locked dependencies and packages."""
    project = load_project(ctx)
    try:
        codec = project.codec_class(registry=project.registry, context=project.context)
        lock = project.load_lock(codec)
    except LockwrightError as exc:
        print_error(str(exc))
        sys.exit(1)
    if lock is None:
        print_error(f"{project.context.lockfile_name} does not exist; run `lockwright resolve`.")
        sys.exit(1)
    print_lock(lock)
