"""Lockwright CLI: Resolve dependencies into a round-trip-stable lockfile.

Entry point for the ``lockwright`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    resolve: Resolve the specfile and write the lockfile.
    update : Re-resolve named packages against an unchanged specfile.
    fetch  : Resolve, then cache locked packages from their sources.
    show   : Display the lockfile.
    clean  : Remove the cache, installed packages and the lockfile.

Usage::

    lockwright resolve
    lockwright resolve --force
    lockwright update A B
    lockwright --project-dir ./app fetch
    lockwright -v show
"""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from lockwright import __version__
from lockwright.cli.clean_cmd import clean_command
from lockwright.cli.fetch_cmd import fetch_command
from lockwright.cli.output import err_console
from lockwright.cli.resolve_cmd import resolve_command
from lockwright.cli.show_cmd import show_command
from lockwright.cli.update_cmd import update_command
from lockwright.config import SPECFILE_ENV_VAR


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Directory to search upwards from for the specfile (default: cwd).",
)
@click.option(
    "--specfile",
    envvar=SPECFILE_ENV_VAR,
    default=None,
    help="Specfile name (default: Lockfile.yaml).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, project_dir: str | None, specfile: str | None, verbose: bool) -> None:
    """Lockwright: resolve dependencies into a round-trip-stable lockfile.

    Reads the specfile, resolves every dependency against its source with
    a backtracking search, and writes a canonical lockfile that later runs
    use to re-resolve only what changed.
    """
    _configure_logging(verbose)
    ctx.obj = {"project_dir": project_dir, "specfile": specfile}


# Register all subcommands
cli.add_command(resolve_command)
cli.add_command(update_command)
cli.add_command(fetch_command)
cli.add_command(show_command)
cli.add_command(clean_command)
