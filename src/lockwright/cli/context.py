"""Shared helpers for building a ``Project`` from CLI options."""

from __future__ import annotations

import sys

import click

from lockwright.config import ProjectContext
from lockwright.core.project import Project
from lockwright.exceptions import LockwrightError
from lockwright.cli.output import print_error


def load_project(ctx: click.Context) -> Project:
    """Locate the project from the group options, exiting 1 if not found."""
    options = ctx.find_root().obj or {}
    try:
        context = ProjectContext.discover(
            options.get("project_dir"), options.get("specfile")
        )
    except LockwrightError as exc:
        print_error(str(exc))
        sys.exit(1)
    return Project(context)
