"""Backtracking dependency resolver.

The resolver performs a depth-first search over candidate manifests with an
explicit stack of choice points instead of recursion:

1. The *assignment* maps each package name to its chosen manifest.
2. The *worklist* holds dependencies still to be checked, seeded with the
   specification's top-level dependencies in declaration order.
3. A dependency whose name is already assigned is checked against the
   assignment; a mismatch is a conflict. An unassigned dependency opens a
   choice point over its candidates (the reusable partial manifest first,
   then the source's candidates in the order the source returned them).
   When a partial manifest fits, the source is only queried if the search
   backtracks past it.
4. On conflict the search returns to the most recent choice point that
   still has untried candidates, restoring the assignment and worklist
   snapshots taken there.

Cyclic dependencies need no special treatment: a cycle is just more edges
to check against the assignment. Failure to find a solution is reported as
an incorrect ``Resolution``, never raised.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from lockwright.core.dependency import manifest_set
from lockwright.core.dependency.models import (
    Dependency,
    Manifest,
    Specification,
    unique_sources,
)
from lockwright.exceptions import SourceUnavailableError, UnresolvableError

if TYPE_CHECKING:
    from lockwright.core.sources.base import Source

logger = logging.getLogger(__name__)

# Cap on the number of conflict messages kept for diagnostics.
MAX_CONFLICTS: int = 50


# ---------------------------------------------------------------------------
# Resolution: the outcome of a resolve call
# ---------------------------------------------------------------------------


@dataclass
class Resolution:
    """Result of dependency resolution.

    A correct resolution corresponds to a valid lockfile: exactly one
    manifest per package reachable from the top-level dependencies, with
    every dependency satisfied by the manifest of the same name.

    Attributes:
        dependencies: The top-level dependencies that were resolved.
        manifests: The resolved manifests in dependency order, or None if
            the search failed.
        conflicts: Conflicts met during the search. For a failed
            resolution they explain why no assignment was found.
    """

    dependencies: tuple[Dependency, ...]
    manifests: tuple[Manifest, ...] | None
    conflicts: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.dependencies = tuple(self.dependencies)
        if self.manifests is not None:
            self.manifests = tuple(self.manifests)

    @property
    def correct(self) -> bool:
        """True when the resolution carries a valid manifest set."""
        return self.manifests is not None

    @property
    def sources(self) -> tuple[Source, ...]:
        """Sources used by the dependencies and manifests, first-seen order."""
        return unique_sources(self.dependencies, self.manifests or ())

    def manifest(self, name: str) -> Manifest | None:
        """Return the resolved manifest named *name*, or None."""
        for m in self.manifests or ():
            if m.name == name:
                return m
        return None

    def require_correct(self) -> tuple[Manifest, ...]:
        """Return the manifests, raising if the resolution failed.

        Raises:
            UnresolvableError: If the resolution is not correct.
        """
        if self.manifests is None:
            detail = "; ".join(self.conflicts) or "no satisfying assignment exists"
            raise UnresolvableError(f"Could not resolve the dependencies: {detail}")
        return self.manifests


# ---------------------------------------------------------------------------
# Options and search state
# ---------------------------------------------------------------------------


class ReuseMode(str, Enum):
    """How partial manifests from a previous lock are used.

    PREFER: a partial manifest is the first candidate tried for its name.
    PIN: partial manifests are fixed assignments that cannot be revisited.
    """

    PREFER = "prefer"
    PIN = "pin"


@dataclass(frozen=True)
class ResolverOptions:
    """Tunable resolver policy.

    Attributes:
        reuse: How partial manifests are used; see ``ReuseMode``.
        max_steps: Upper bound on worklist steps; None for no bound.
    """

    reuse: ReuseMode = ReuseMode.PREFER
    max_steps: int | None = None


@dataclass
class _ChoicePoint:
    dependency: Dependency
    remaining: list[Manifest]
    assignment: dict[str, Manifest]
    worklist: deque[Dependency]
    expanded: set[str]
    # Source candidates not fetched yet: only the preferred manifest was tried.
    deferred: bool = False
    tried: Manifest | None = None


@dataclass
class _State:
    assignment: dict[str, Manifest]
    worklist: deque[Dependency]
    expanded: set[str]


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class Resolver:
    """Backtracking resolver over pluggable sources.

    Identical inputs (specification, partial manifests, source candidate
    order) always produce an identical resolution.

    Args:
        options: Resolver policy. Defaults to ``ResolverOptions()``.
    """

    def __init__(self, options: ResolverOptions | None = None) -> None:
        self.options = options or ResolverOptions()

    def resolve(
        self,
        spec: Specification,
        partial_manifests: Iterable[Manifest] = (),
    ) -> Resolution:
        """Resolve *spec*, preferring *partial_manifests* where they fit.

        Args:
            spec: The specification to resolve.
            partial_manifests: Manifests retained from a previous lock.

        Returns:
            A ``Resolution``; ``correct`` is False if the search is exhausted.
        """
        partial = manifest_set.index_by_name(partial_manifests)
        pin = self.options.reuse is ReuseMode.PIN
        state = _State(
            assignment=dict(partial) if pin else {},
            worklist=deque(spec.dependencies),
            expanded=set(),
        )
        stack: list[_ChoicePoint] = []
        conflicts: list[str] = []
        memo: dict[tuple[Source, str], list[Manifest]] = {}
        steps = 0

        logger.debug(
            "Resolving %d dependencies with %d partial manifest(s)",
            len(spec.dependencies), len(partial),
        )

        while state.worklist:
            steps += 1
            if self.options.max_steps is not None and steps > self.options.max_steps:
                _note(conflicts, f"Gave up after {self.options.max_steps} steps")
                return Resolution(spec.dependencies, None, conflicts)

            dep = state.worklist.popleft()
            current = state.assignment.get(dep.name)
            if current is not None:
                if dep.satisfied_by(current):
                    if dep.name not in state.expanded:
                        state.expanded.add(dep.name)
                        state.worklist.extend(current.dependencies)
                    continue
                _note(conflicts, f"{dep} conflicts with {current} from {current.source}")
            else:
                preferred = None if pin else partial.get(dep.name)
                if preferred is not None and dep.satisfied_by(preferred):
                    first, remaining, deferred = preferred, [], True
                else:
                    candidates = self._candidates(dep, memo)
                    first = candidates[0] if candidates else None
                    remaining, deferred = candidates[1:], False
                if first is not None:
                    stack.append(_ChoicePoint(
                        dependency=dep,
                        remaining=remaining,
                        assignment=dict(state.assignment),
                        worklist=deque(state.worklist),
                        expanded=set(state.expanded),
                        deferred=deferred,
                        tried=first,
                    ))
                    _assign(state, first)
                    continue
                _note(conflicts, f"No candidate satisfies {dep}")

            restored = self._backtrack(stack, memo)
            if restored is None:
                logger.info("Could not resolve the dependencies after %d steps", steps)
                return Resolution(spec.dependencies, None, conflicts)
            state = restored

        manifests = _reachable(spec.dependencies, state.assignment)
        logger.debug("Resolved %d manifest(s) in %d steps", len(manifests), steps)
        return Resolution(spec.dependencies, manifest_set.sort(manifests), conflicts)

    @staticmethod
    def _candidates(
        dep: Dependency,
        memo: dict[tuple[Source, str], list[Manifest]],
    ) -> list[Manifest]:
        """Source candidates satisfying *dep*, queried once per source and name."""
        key = (dep.source, dep.name)
        if key not in memo:
            try:
                memo[key] = list(dep.source.candidates(dep))
            except SourceUnavailableError as exc:
                logger.warning("Source %s unavailable for %s: %s", dep.source, dep.name, exc)
                memo[key] = []
        return [m for m in memo[key] if dep.satisfied_by(m)]

    def _backtrack(
        self,
        stack: list[_ChoicePoint],
        memo: dict[tuple[Source, str], list[Manifest]],
    ) -> _State | None:
        while stack:
            point = stack[-1]
            if point.deferred:
                point.remaining = [
                    m for m in self._candidates(point.dependency, memo)
                    if m != point.tried
                ]
                point.deferred = False
            if not point.remaining:
                stack.pop()
                continue
            candidate = point.remaining.pop(0)
            logger.debug("Backtracking: trying %s for %s", candidate, point.dependency)
            state = _State(
                assignment=dict(point.assignment),
                worklist=deque(point.worklist),
                expanded=set(point.expanded),
            )
            _assign(state, candidate)
            return state
        return None


def _assign(state: _State, manifest: Manifest) -> None:
    state.assignment[manifest.name] = manifest
    state.expanded.add(manifest.name)
    state.worklist.extend(manifest.dependencies)


def _note(conflicts: list[str], message: str) -> None:
    if message not in conflicts and len(conflicts) < MAX_CONFLICTS:
        conflicts.append(message)


def _reachable(
    dependencies: Iterable[Dependency], assignment: dict[str, Manifest]
) -> list[Manifest]:
    """Assigned manifests reachable from *dependencies*, in assignment order."""
    seen: set[str] = set()
    queue = deque(dep.name for dep in dependencies)
    while queue:
        name = queue.popleft()
        if name in seen or name not in assignment:
            continue
        seen.add(name)
        queue.extend(dep.name for dep in assignment[name].dependencies)
    return [m for name, m in assignment.items() if name in seen]


def resolve(
    spec: Specification,
    partial_manifests: Iterable[Manifest] = (),
    options: ResolverOptions | None = None,
) -> Resolution:
    """Resolve *spec* with a fresh ``Resolver``."""
    return Resolver(options).resolve(spec, partial_manifests)
