"""In-memory catalog source.

``MemorySource`` serves manifests from a nested mapping and is the
source used for programmatic resolution and for tests::

    source = MemorySource("main", {
        "A": {"1.0": {}, "2.0": {"C": ">= 1"}},
        "C": {"1.0": {}, "2.0": {}},
    })

Versions are offered newest first. A source rebuilt from a lockfile has an
empty catalog: it still identifies the manifests it owned, but cannot
offer new candidates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from lockwright.core.dependency.constraints import Version
from lockwright.core.dependency.models import Dependency, Manifest
from lockwright.core.sources.base import Source

if TYPE_CHECKING:
    from lockwright.config import ProjectContext

logger = logging.getLogger(__name__)

# Per-version dependencies: a name-to-requirement mapping bound to this source,
# or ready Dependency objects (which may point at other sources).
Dependencies = Mapping[str, str | None] | Iterable[Dependency]
Catalog = Mapping[str, Mapping[str, Dependencies]]


class MemorySource(Source):
    """A source backed by a ``{name: {version: {dep: requirement}}}`` catalog.

    Attributes:
        label: Identifies the source; two memory sources with the same
            label are the same source.
        cached: Every list of manifests passed to ``cache()``, in call order.
        queries: Names passed to ``candidates()``, in call order.
    """

    kind = "memory"

    def __init__(self, label: str, catalog: Catalog | None = None) -> None:
        self.label = label
        self._catalog: dict[str, dict[str, Dependencies]] = {
            name: dict(versions) for name, versions in (catalog or {}).items()
        }
        self.cached: list[list[Manifest]] = []
        self.queries: list[str] = []

    def lock_options(self) -> dict[str, str]:
        return {"label": self.label}

    @classmethod
    def from_lock_options(
        cls, options: Mapping[str, str], context: ProjectContext | None = None
    ) -> MemorySource:
        return cls(options["label"])

    def add(self, name: str, version: str, dependencies: Dependencies | None = None) -> None:
        """Add one package version to the catalog."""
        if dependencies is None:
            dependencies = {}
        elif not isinstance(dependencies, Mapping):
            dependencies = tuple(dependencies)
        self._catalog.setdefault(name, {})[version] = dependencies

    def candidates(self, dependency: Dependency) -> list[Manifest]:
        self.queries.append(dependency.name)
        versions = self._catalog.get(dependency.name, {})
        ordered = sorted(versions, key=Version, reverse=True)
        return [self.manifest(dependency.name, v, versions[v]) for v in ordered]

    def cache(self, manifests: list[Manifest]) -> None:
        logger.debug("Caching %d manifest(s) from %s", len(manifests), self)
        self.cached.append(list(manifests))
