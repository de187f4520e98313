"""Source capability: the pluggable provider of candidate manifests.

Every concrete source subclasses ``Source`` and defines:

- ``kind``: a short type name written to lockfiles and specfiles.
- ``lock_options()``: the string options that identify the source.
- ``from_lock_options()``: rebuild a source from those options.
- ``candidates()``: ordered manifests for a dependency, best first.
- ``cache()``: fetch-and-store side effect for manifests about to be used.

Two sources are equal when their ``kind`` and ``lock_options()`` are equal;
the resolver relies on this to check that a manifest comes from the
source a dependency asks for.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from lockwright.core.dependency.constraints import VersionConstraint
from lockwright.core.dependency.models import Dependency, Manifest

if TYPE_CHECKING:
    from lockwright.config import ProjectContext


class Source(ABC):
    """Abstract base class for manifest providers."""

    kind: str

    @abstractmethod
    def lock_options(self) -> dict[str, str]:
        """Return the options that identify this source in a lockfile."""

    @classmethod
    @abstractmethod
    def from_lock_options(
        cls, options: Mapping[str, str], context: ProjectContext | None = None
    ) -> Source:
        """Rebuild a source from ``lock_options()`` output."""

    @abstractmethod
    def candidates(self, dependency: Dependency) -> list[Manifest]:
        """Return manifests for *dependency*, most preferred first.

        Raises:
            SourceUnavailableError: If the source cannot be queried.
        """

    @abstractmethod
    def cache(self, manifests: list[Manifest]) -> None:
        """Fetch and store *manifests* ahead of installation.

        Raises:
            SourceUnavailableError: If the source cannot be reached.
        """

    # -- Identity -----------------------------------------------------------

    @property
    def identity(self) -> tuple[str, tuple[tuple[str, str], ...]]:
        return (self.kind, tuple(sorted(self.lock_options().items())))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Source) and self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __str__(self) -> str:
        options = " ".join(f"{k}={v}" for k, v in sorted(self.lock_options().items()))
        return f"{self.kind} {options}".strip()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"

    # -- Helpers ------------------------------------------------------------

    def dependency(self, name: str, requirement: str | VersionConstraint = "*") -> Dependency:
        """Build a dependency on *name* bound to this source."""
        return Dependency(name=name, requirement=VersionConstraint(str(requirement)), source=self)

    def manifest(
        self,
        name: str,
        version: str,
        dependencies: Mapping[str, str | None] | Iterable[Dependency] = (),
    ) -> Manifest:
        """Build a manifest owned by this source.

        Args:
            name: Package name.
            version: Version string.
            dependencies: Either ready ``Dependency`` objects or a mapping of
                dependency name to requirement text, bound to this source.
        """
        if isinstance(dependencies, Mapping):
            deps = tuple(
                self.dependency(dep_name, "*" if requirement is None else str(requirement))
                for dep_name, requirement in dependencies.items()
            )
        else:
            deps = tuple(dependencies)
        return Manifest(name=name, version=version, source=self, dependencies=deps)
