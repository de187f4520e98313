"""Project configuration context.

``ProjectContext`` carries every path the workflows need. It is created
once (usually by ``ProjectContext.discover``) and passed explicitly to the
components that touch the filesystem, so several projects can be handled in
one process without shared module-level state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from lockwright.exceptions import ProjectNotFoundError

DEFAULT_SPECFILE_NAME: str = "Lockfile.yaml"

# Environment variable overriding the specfile name used by the CLI.
SPECFILE_ENV_VAR: str = "LOCKWRIGHT_SPECFILE"

CACHE_DIR: str = "tmp/lockwright/cache"
INSTALL_DIR: str = "vendor/lockwright"


def default_specfile_name() -> str:
    """Return the specfile name from the environment, or the default."""
    return os.environ.get(SPECFILE_ENV_VAR) or DEFAULT_SPECFILE_NAME


@dataclass(frozen=True)
class ProjectContext:
    """Paths of one lockwright project.

    Attributes:
        project_path: Directory holding the specfile.
        specfile_name: File name of the specfile (e.g. "Lockfile.yaml").
    """

    project_path: Path
    specfile_name: str = DEFAULT_SPECFILE_NAME

    def __post_init__(self) -> None:
        object.__setattr__(self, "project_path", Path(self.project_path).resolve())

    @classmethod
    def discover(
        cls, start: Path | None = None, specfile_name: str | None = None
    ) -> ProjectContext:
        """Walk up from *start* to the first directory containing the specfile.

        Args:
            start: Directory to start from. Defaults to the working directory.
            specfile_name: Specfile to look for. Defaults to
                ``default_specfile_name()``.

        Raises:
            ProjectNotFoundError: If no ancestor directory has the specfile.
        """
        name = specfile_name or default_specfile_name()
        root = Path(start or Path.cwd()).resolve()
        for candidate in (root, *root.parents):
            if (candidate / name).is_file():
                return cls(project_path=candidate, specfile_name=name)
        raise ProjectNotFoundError(f"Cannot find {name}!")

    @property
    def specfile_path(self) -> Path:
        return self.project_path / self.specfile_name

    @property
    def lockfile_name(self) -> str:
        return f"{self.specfile_name}.lock"

    @property
    def lockfile_path(self) -> Path:
        return self.project_path / self.lockfile_name

    @property
    def cache_path(self) -> Path:
        return self.project_path / CACHE_DIR

    @property
    def install_path(self) -> Path:
        return self.project_path / INSTALL_DIR

    def relative(self, path: Path) -> Path:
        """Express *path* relative to the project directory when possible."""
        try:
            return Path(path).resolve().relative_to(self.project_path)
        except ValueError:
            return Path(path)

    def resolve_path(self, path: str | Path) -> Path:
        """Resolve a possibly relative *path* against the project directory."""
        p = Path(path).expanduser()
        return p if p.is_absolute() else self.project_path / p
