"""``lockwright resolve``: Bring the lockfile in line with the specfile.

Re-resolves only the dependencies whose declaration changed since the
lockfile was written, reusing everything else.

Exit Codes:
    0: Lockfile written or already up to date.
    1: Resolution failed or the project could not be loaded.
"""

from __future__ import annotations

import sys

import click

from lockwright.cli.context import load_project
from lockwright.cli.output import print_error, print_outcome
from lockwright.exceptions import LockwrightError


@click.command("resolve")
@click.option("--force", is_flag=True, help="Ignore the existing lockfile.")
@click.pass_context
def resolve_command(ctx: click.Context, force: bool) -> None:
    """Resolve the specfile and write the lockfile."""
    project = load_project(ctx)
    try:
        outcome = project.resolve(force=force)
    except LockwrightError as exc:
        print_error(str(exc))
        sys.exit(1)
    print_outcome(outcome, project.context.lockfile_name)
    sys.exit(0 if outcome.ok else 1)
