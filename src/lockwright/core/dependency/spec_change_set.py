"""Specification-versus-lock change detection.

``SpecChangeSet`` compares the top-level dependencies of the current
specification with those recorded in a previous lock, and works out which
locked manifests can be kept when re-resolving.

- **unchanged**: same name, canonical requirement and source.
- **added**: in the specification only.
- **removed**: in the lock only.
- **changed**: in both, but the requirement or source differs.

Only the subgraphs of unchanged dependencies are retained; a manifest
shared with an added, removed or changed dependency survives as long as an
unchanged dependency still reaches it.
"""

from __future__ import annotations

import logging
from enum import Enum

from lockwright.core.dependency import manifest_set
from lockwright.core.dependency.models import Dependency, Manifest, Specification
from lockwright.core.dependency.resolver import Resolution

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    """Classification of one top-level dependency."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


def _key(dep: Dependency) -> tuple:
    return (dep.name, dep.requirement.canonical, dep.source.identity)


class SpecChangeSet:
    """Differences between a specification and a previous lock.

    Args:
        spec: The current specification.
        lock: The resolution loaded from the previous lockfile.
    """

    def __init__(self, spec: Specification, lock: Resolution) -> None:
        self.spec = spec
        self.lock = lock
        self._spec_deps = {d.name: d for d in spec.dependencies}
        self._lock_deps = {d.name: d for d in lock.dependencies}

    def same(self) -> bool:
        """True if no top-level dependency was added, removed or changed."""
        return sorted(map(_key, self.spec.dependencies)) == sorted(
            map(_key, self.lock.dependencies)
        )

    def classify(self) -> dict[str, ChangeKind]:
        """Classify each top-level dependency name.

        Specification dependencies come first in declaration order,
        followed by removed dependencies in lock order.
        """
        kinds: dict[str, ChangeKind] = {}
        for name, dep in self._spec_deps.items():
            locked = self._lock_deps.get(name)
            if locked is None:
                kinds[name] = ChangeKind.ADDED
            elif _key(locked) == _key(dep):
                kinds[name] = ChangeKind.UNCHANGED
            else:
                kinds[name] = ChangeKind.CHANGED
        for name in self._lock_deps:
            if name not in self._spec_deps:
                kinds[name] = ChangeKind.REMOVED
        return kinds

    def _names(self, kind: ChangeKind) -> list[str]:
        return [name for name, k in self.classify().items() if k is kind]

    @property
    def added(self) -> list[str]:
        return self._names(ChangeKind.ADDED)

    @property
    def removed(self) -> list[str]:
        return self._names(ChangeKind.REMOVED)

    @property
    def changed(self) -> list[str]:
        return self._names(ChangeKind.CHANGED)

    @property
    def unchanged(self) -> list[str]:
        return self._names(ChangeKind.UNCHANGED)

    def analyze(self) -> list[Manifest]:
        """Return the partial manifest set to feed back into the resolver.

        Keeps the locked subgraph of every unchanged dependency and strips
        the manifests named by added, removed and changed dependencies
        together with whatever only they reach.

        Raises:
            UnresolvableError: If the lock is not a correct resolution.
        """
        manifests = self.lock.require_correct()
        kinds = self.classify()
        stripped = [n for n, k in kinds.items() if k is not ChangeKind.UNCHANGED]
        roots = [n for n, k in kinds.items() if k is ChangeKind.UNCHANGED]
        for name, kind in kinds.items():
            if kind is not ChangeKind.UNCHANGED:
                logger.debug("Dependency %s is %s", name, kind.value)
        retained = manifest_set.deep_strip(manifests, stripped, roots=roots)
        logger.debug("Retaining %d of %d locked manifest(s)", len(retained), len(manifests))
        return retained
