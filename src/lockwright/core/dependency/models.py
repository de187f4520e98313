"""Dependencies, manifests and specifications.

These are the read-only values the resolution core works on. They are
produced by the specfile reader and by source backends, and never mutated
afterwards. Manifests refer to their dependencies by *name*: the edge from
a manifest to the manifest that satisfies one of its dependencies is
looked up in a ``ManifestSet`` index, never stored as an object reference,
so cyclic dependency groups need no reference cycles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from lockwright.core.dependency.constraints import (
    Version,
    VersionConstraint,
    parse_version,
)

if TYPE_CHECKING:
    from lockwright.core.sources.base import Source


@dataclass(frozen=True)
class Dependency:
    """A named requirement bound to a source, not yet resolved to a version.

    Attributes:
        name: Package name; unique key within a specification.
        requirement: Version predicate the resolved manifest must satisfy.
        source: The source expected to provide the package.
    """

    name: str
    requirement: VersionConstraint
    source: Source

    def __post_init__(self) -> None:
        if isinstance(self.requirement, str):
            object.__setattr__(self, "requirement", VersionConstraint(self.requirement))

    def satisfied_by(self, manifest: Manifest) -> bool:
        """Return True if *manifest* can stand in for this dependency.

        The names must match, the manifest must come from the same source,
        and its version must satisfy the requirement.
        """
        return (
            manifest.name == self.name
            and manifest.source == self.source
            and self.requirement.satisfies(manifest.version)
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.requirement}) from {self.source}"


@dataclass(frozen=True)
class Manifest:
    """A concrete package version with its own dependency list.

    Attributes:
        name: Package name.
        version: Resolved version.
        source: The source that produced this manifest.
        dependencies: Ordered dependencies of this package version.
    """

    name: str
    version: Version
    source: Source
    dependencies: tuple[Dependency, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "version", parse_version(self.version))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class Specification:
    """The declared top-level dependencies of a project.

    Attributes:
        dependencies: Top-level dependencies in declaration order.
        sources: Sources referenced by the specification. Defaults to the
            sources of ``dependencies`` in first-seen order.
    """

    dependencies: tuple[Dependency, ...]
    sources: tuple[Source, ...] = ()

    def __post_init__(self) -> None:
        deps = tuple(self.dependencies)
        seen: set[str] = set()
        for dep in deps:
            if dep.name in seen:
                raise ValueError(f"Duplicate top-level dependency: {dep.name!r}")
            seen.add(dep.name)
        object.__setattr__(self, "dependencies", deps)
        sources = list(self.sources)
        for dep in deps:
            if dep.source not in sources:
                sources.append(dep.source)
        object.__setattr__(self, "sources", tuple(sources))

    @property
    def dependency_names(self) -> list[str]:
        """Return top-level dependency names in declaration order."""
        return [dep.name for dep in self.dependencies]


def unique_sources(
    dependencies: Iterable[Dependency], manifests: Iterable[Manifest] = ()
) -> tuple[Source, ...]:
    """Collect every source referenced by *dependencies* and *manifests*.

    Sources are returned in first-seen order: top-level dependencies first,
    then each manifest followed by the sources of its own dependencies.
    """
    sources: list[Source] = []

    def _add(source: Source) -> None:
        if source not in sources:
            sources.append(source)

    for dep in dependencies:
        _add(dep.source)
    for manifest in manifests:
        _add(manifest.source)
        for dep in manifest.dependencies:
            _add(dep.source)
    return tuple(sources)
