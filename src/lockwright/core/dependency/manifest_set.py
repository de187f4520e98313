"""Manifest set algebra: ordering and subgraph removal.

A ``ManifestSet`` stores manifests in an index-based arena: manifests live
in a list, and the dependency edges of manifest ``i`` are the integer
positions of the manifests its dependencies name. Dependencies naming a
package that is not in the set simply contribute no edge, which lets the
same algebra work on complete resolutions and on partial manifest sets.

The module-level functions ``sort``, ``deep_strip``, ``deep_keep`` and
``shallow_strip`` are the public API; each accepts any iterable of
manifests and returns a new list.
"""

from __future__ import annotations

import heapq
from collections import deque
from collections.abc import Iterable, Iterator

from lockwright.core.dependency.models import Manifest
from lockwright.exceptions import CycleError


class ManifestSet:
    """An immutable, name-indexed collection of manifests.

    Raises:
        ValueError: If two manifests share a name.
    """

    def __init__(self, manifests: Iterable[Manifest]) -> None:
        self._manifests: list[Manifest] = list(manifests)
        self._index: dict[str, int] = {}
        for i, manifest in enumerate(self._manifests):
            if manifest.name in self._index:
                raise ValueError(f"Duplicate manifest name: {manifest.name!r}")
            self._index[manifest.name] = i
        self._edges: list[list[int]] = []
        for manifest in self._manifests:
            targets: list[int] = []
            for dep in manifest.dependencies:
                target = self._index.get(dep.name)
                if target is not None and target not in targets:
                    targets.append(target)
            self._edges.append(targets)

    def __len__(self) -> int:
        return len(self._manifests)

    def __iter__(self) -> Iterator[Manifest]:
        return iter(self._manifests)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def get(self, name: str) -> Manifest | None:
        """Return the manifest named *name*, or None."""
        i = self._index.get(name)
        return None if i is None else self._manifests[i]

    @property
    def names(self) -> list[str]:
        """Return manifest names in input order."""
        return [m.name for m in self._manifests]

    # -- Graph primitives ---------------------------------------------------

    def _components(self) -> list[list[int]]:
        """Strongly connected components (iterative Tarjan).

        Each component's members are listed in input order.
        """
        n = len(self._manifests)
        index_of = [-1] * n
        low = [0] * n
        on_stack = [False] * n
        stack: list[int] = []
        components: list[list[int]] = []
        counter = 0

        for root in range(n):
            if index_of[root] != -1:
                continue
            work: list[tuple[int, int]] = [(root, 0)]
            while work:
                v, pos = work[-1]
                if pos == 0 and index_of[v] == -1:
                    index_of[v] = low[v] = counter
                    counter += 1
                    stack.append(v)
                    on_stack[v] = True
                edges = self._edges[v]
                if pos < len(edges):
                    work[-1] = (v, pos + 1)
                    w = edges[pos]
                    if index_of[w] == -1:
                        work.append((w, 0))
                    elif on_stack[w]:
                        low[v] = min(low[v], index_of[w])
                    continue
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[v])
                if low[v] == index_of[v]:
                    component: list[int] = []
                    while True:
                        w = stack.pop()
                        on_stack[w] = False
                        component.append(w)
                        if w == v:
                            break
                    components.append(sorted(component))
        return components

    def _check_cycle(self, component: list[int]) -> None:
        """Raise CycleError unless every edge inside *component* is satisfied."""
        members = set(component)
        if len(component) == 1 and component[0] not in self._edges[component[0]]:
            return
        for v in component:
            manifest = self._manifests[v]
            for dep in manifest.dependencies:
                target = self._index.get(dep.name)
                if target in members and not dep.satisfied_by(self._manifests[target]):
                    cycle = " -> ".join(self._manifests[i].name for i in component)
                    raise CycleError(
                        f"Cyclic manifests {cycle} are inconsistent: "
                        f"{manifest} requires {dep.name} ({dep.requirement}) "
                        f"but the cycle holds {self._manifests[target]}"
                    )

    # -- Algebra ------------------------------------------------------------

    def sort(self) -> list[Manifest]:
        """Return manifests with every dependency before its dependents.

        Independent manifests keep their input order. Mutually dependent
        manifests are emitted together, in input order, provided each
        dependency inside the group is satisfied within the group.

        Raises:
            CycleError: If a cyclic group is not self-consistent.
        """
        components = self._components()
        component_of = [0] * len(self._manifests)
        for c, component in enumerate(components):
            self._check_cycle(component)
            for v in component:
                component_of[v] = c

        pending = [0] * len(components)
        dependents: list[set[int]] = [set() for _ in components]
        for c, component in enumerate(components):
            needs = {
                component_of[w]
                for v in component
                for w in self._edges[v]
                if component_of[w] != c
            }
            pending[c] = len(needs)
            for d in needs:
                dependents[d].add(c)

        ready = [(components[c][0], c) for c in range(len(components)) if pending[c] == 0]
        heapq.heapify(ready)
        ordered: list[Manifest] = []
        while ready:
            _, c = heapq.heappop(ready)
            ordered.extend(self._manifests[v] for v in components[c])
            for d in dependents[c]:
                pending[d] -= 1
                if pending[d] == 0:
                    heapq.heappush(ready, (components[d][0], d))
        return ordered

    def _roots(self) -> list[int]:
        """Manifests of every component no other component depends on."""
        components = self._components()
        component_of = [0] * len(self._manifests)
        for c, component in enumerate(components):
            for v in component:
                component_of[v] = c
        depended_on = {
            component_of[w]
            for v, edges in enumerate(self._edges)
            for w in edges
            if component_of[w] != component_of[v]
        }
        return sorted(
            v
            for c, component in enumerate(components)
            if c not in depended_on
            for v in component
        )

    def _reachable(self, start: Iterable[int], blocked: set[int]) -> set[int]:
        seen: set[int] = set()
        queue: deque[int] = deque(i for i in start if i not in blocked)
        while queue:
            v = queue.popleft()
            if v in seen:
                continue
            seen.add(v)
            for w in self._edges[v]:
                if w not in seen and w not in blocked:
                    queue.append(w)
        return seen

    def deep_strip(
        self, names: Iterable[str], roots: Iterable[str] | None = None
    ) -> list[Manifest]:
        """Remove *names* and everything reachable only through them.

        Args:
            names: Names of the manifests to remove.
            roots: Names of the retained top-level dependencies. When None,
                the roots are the manifests nothing else in the set depends
                on (a cyclic group with no outside dependents counts as a
                root as a whole).

        Returns:
            The retained manifests in input order.
        """
        blocked = {self._index[n] for n in names if n in self._index}
        if roots is None:
            start = self._roots()
        else:
            start = [self._index[r] for r in roots if r in self._index]
        keep = self._reachable(start, blocked)
        return [m for i, m in enumerate(self._manifests) if i in keep]

    def deep_keep(self, names: Iterable[str]) -> list[Manifest]:
        """Keep *names* and everything reachable from them, in input order."""
        start = [self._index[n] for n in names if n in self._index]
        keep = self._reachable(start, set())
        return [m for i, m in enumerate(self._manifests) if i in keep]

    def shallow_strip(self, names: Iterable[str]) -> list[Manifest]:
        """Remove exactly the manifests named in *names*."""
        drop = set(names)
        return [m for m in self._manifests if m.name not in drop]


def index_by_name(manifests: Iterable[Manifest]) -> dict[str, Manifest]:
    """Map manifest name to manifest, rejecting duplicates."""
    return {m.name: m for m in ManifestSet(manifests)}


def sort(manifests: Iterable[Manifest]) -> list[Manifest]:
    """Topologically order *manifests*; see ``ManifestSet.sort``."""
    return ManifestSet(manifests).sort()


def deep_strip(
    manifests: Iterable[Manifest],
    names: Iterable[str],
    roots: Iterable[str] | None = None,
) -> list[Manifest]:
    """Remove *names* and their exclusive subgraphs; see ``ManifestSet.deep_strip``."""
    return ManifestSet(manifests).deep_strip(names, roots)


def deep_keep(manifests: Iterable[Manifest], names: Iterable[str]) -> list[Manifest]:
    """Keep *names* and their subgraphs; see ``ManifestSet.deep_keep``."""
    return ManifestSet(manifests).deep_keep(names)


def shallow_strip(manifests: Iterable[Manifest], names: Iterable[str]) -> list[Manifest]:
    """Remove exactly *names*; see ``ManifestSet.shallow_strip``."""
    return ManifestSet(manifests).shallow_strip(names)
