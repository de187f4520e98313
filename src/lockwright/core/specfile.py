"""Specfile reading: YAML text to a typed ``Specification``.

A specfile declares named sources and the top-level dependencies::

    sources:
      main:
        type: index
        path: vendor/index
    default_source: main
    dependencies:
      - name: A
        requirement: ">= 1.0"
      - B                      # any version, from the default source

When exactly one source is declared it is the default. The core never
evaluates specfile syntax itself; it only sees the ``Specification`` built
here or by ``SpecificationBuilder`` in code.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import yaml

from lockwright.core.dependency.constraints import VersionConstraint
from lockwright.core.dependency.models import Dependency, Specification
from lockwright.core.sources.base import Source
from lockwright.core.sources.registry import SourceRegistry, default_source_registry
from lockwright.exceptions import SpecfileError

if TYPE_CHECKING:
    from lockwright.config import ProjectContext

logger = logging.getLogger(__name__)


class SpecificationBuilder:
    """Fluent builder for ``Specification`` objects.

    Example::

        main = MemorySource("main", catalog)
        spec = (
            SpecificationBuilder()
            .source("main", main, default=True)
            .depend("A", ">= 1.0")
            .depend("B")
            .build()
        )
    """

    def __init__(self) -> None:
        self._sources: dict[str, Source] = {}
        self._default: str | None = None
        self._dependencies: list[Dependency] = []

    def source(self, alias: str, source: Source, default: bool = False) -> SpecificationBuilder:
        """Declare *source* under *alias*; the first source is the default."""
        self._sources[alias] = source
        if default or self._default is None:
            self._default = alias
        return self

    def set_default(self, alias: str) -> SpecificationBuilder:
        """Make the source declared as *alias* the default."""
        if alias not in self._sources:
            raise SpecfileError(f"Unknown default source {alias!r}")
        self._default = alias
        return self

    def depend(
        self,
        name: str,
        requirement: str | VersionConstraint = "*",
        source: str | Source | None = None,
    ) -> SpecificationBuilder:
        """Add a top-level dependency.

        Args:
            name: Package name.
            requirement: Constraint text or ``VersionConstraint``.
            source: A source alias, a ``Source``, or None for the default.

        Raises:
            SpecfileError: If the source alias is unknown or no default exists.
        """
        if isinstance(source, Source):
            resolved = source
        else:
            alias = source or self._default
            if alias is None or alias not in self._sources:
                raise SpecfileError(f"Unknown source {alias!r} for dependency {name!r}")
            resolved = self._sources[alias]
        try:
            constraint = (
                requirement
                if isinstance(requirement, VersionConstraint)
                else VersionConstraint(str(requirement))
            )
        except ValueError as exc:
            raise SpecfileError(f"Invalid requirement for {name!r}: {exc}") from exc
        self._dependencies.append(Dependency(name=name, requirement=constraint, source=resolved))
        return self

    def build(self) -> Specification:
        """Return the ``Specification``.

        Raises:
            SpecfileError: If a dependency name is declared twice.
        """
        try:
            return Specification(tuple(self._dependencies), tuple(self._sources.values()))
        except ValueError as exc:
            raise SpecfileError(str(exc)) from exc


def parse_specfile(
    text: str,
    context: ProjectContext | None = None,
    registry: SourceRegistry | None = None,
) -> Specification:
    """Parse specfile YAML into a ``Specification``.

    Args:
        text: The specfile content.
        context: Project context handed to the sources.
        registry: Source types available to the specfile.

    Raises:
        SpecfileError: If the YAML is invalid or the content is malformed.
    """
    registry = registry or default_source_registry()
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise SpecfileError(f"Invalid specfile YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise SpecfileError("Specfile must be a mapping")

    builder = SpecificationBuilder()
    sources: dict[str, Any] = data.get("sources") or {}
    if not isinstance(sources, dict):
        raise SpecfileError("'sources' must be a mapping of alias to options")
    for alias, entry in sources.items():
        if not isinstance(entry, dict) or "type" not in entry:
            raise SpecfileError(f"Source {alias!r} must be a mapping with a 'type'")
        options = {str(k): str(v) for k, v in entry.items() if k != "type"}
        try:
            source = registry.build(str(entry["type"]), options, context)
        except KeyError as exc:
            raise SpecfileError(f"Source {alias!r}: unknown type or missing option {exc}") from exc
        builder.source(str(alias), source)

    default = data.get("default_source")
    if default is not None:
        if str(default) not in sources:
            raise SpecfileError(f"Unknown default_source {default!r}")
        builder.set_default(str(default))

    dependencies = data.get("dependencies") or []
    if not isinstance(dependencies, list):
        raise SpecfileError("'dependencies' must be a list")
    for entry in dependencies:
        if isinstance(entry, str):
            builder.depend(entry)
        elif isinstance(entry, dict) and "name" in entry:
            requirement = entry.get("requirement")
            builder.depend(
                str(entry["name"]),
                "*" if requirement is None else str(requirement),
                None if entry.get("source") is None else str(entry["source"]),
            )
        else:
            raise SpecfileError(f"Invalid dependency entry: {entry!r}")

    spec = builder.build()
    logger.debug("Read %d top-level dependencies", len(spec.dependencies))
    return spec


def read_specfile(
    context: ProjectContext,
    registry: SourceRegistry | None = None,
) -> Specification:
    """Read and parse the project's specfile.

    Raises:
        SpecfileError: If the specfile is missing or malformed.
    """
    try:
        text = context.specfile_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecfileError(f"Cannot read {context.specfile_name}: {exc}") from exc
    return parse_specfile(text, context, registry)
