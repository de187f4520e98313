"""Registry of source types.

Specfiles and lockfiles name sources by ``kind``; the ``SourceRegistry``
maps each kind to the ``Source`` subclass that can rebuild it from its
options. ``default_source_registry()`` pre-registers the built-in sources,
and ``register()`` adds custom ones.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from lockwright.core.sources.base import Source
from lockwright.core.sources.index import IndexSource
from lockwright.core.sources.memory import MemorySource

if TYPE_CHECKING:
    from lockwright.config import ProjectContext


class SourceRegistry:
    """Maps source kinds to ``Source`` subclasses."""

    def __init__(self) -> None:
        self._types: dict[str, type[Source]] = {}

    def register(self, source_type: type[Source]) -> None:
        """Register *source_type* under its ``kind``."""
        self._types[source_type.kind] = source_type

    @property
    def kinds(self) -> list[str]:
        return sorted(self._types)

    def build(
        self,
        kind: str,
        options: Mapping[str, str],
        context: ProjectContext | None = None,
    ) -> Source:
        """Instantiate the source of *kind* from *options*.

        Raises:
            KeyError: If *kind* is not registered or an option is missing.
        """
        if kind not in self._types:
            raise KeyError(kind)
        return self._types[kind].from_lock_options(options, context)


def default_source_registry() -> SourceRegistry:
    """Create a registry with the built-in ``index`` and ``memory`` sources."""
    registry = SourceRegistry()
    registry.register(IndexSource)
    registry.register(MemorySource)
    return registry
