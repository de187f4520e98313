"""``lockwright update NAME...``: Re-resolve named packages.

Everything not named (and not reachable only through a named package)
keeps its locked version. The specfile must be unchanged since the lock.

Exit Codes:
    0: Lockfile written.
    1: Missing lockfile, changed specfile, or resolution failure.
"""

from __future__ import annotations

import sys

import click

from lockwright.cli.context import load_project
from lockwright.cli.output import print_error, print_outcome
from lockwright.exceptions import LockwrightError


@click.command("update")
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def update_command(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Update NAMES to the newest versions the specfile allows."""
    project = load_project(ctx)
    try:
        outcome = project.update(names)
    except LockwrightError as exc:
        print_error(str(exc))
        sys.exit(1)
    print_outcome(outcome, project.context.lockfile_name)
    sys.exit(0 if outcome.ok else 1)
