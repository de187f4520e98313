"""Property-based tests for resolution, ordering and lockfile round trips.

Random catalogs over a handful of package names are small enough that
every possible assignment can be enumerated, which gives an independent
oracle for the backtracking resolver:

- Sound and complete: the resolver succeeds exactly when some assignment
  satisfies every reachable dependency, and its answer is such an
  assignment.
- Deterministic: equal inputs give equal resolutions.
- Stable: a lockfile bounces unchanged, and reusing a resolution as the
  partial manifest set reproduces it.
- ``sort`` and ``deep_strip`` agree with straightforward reference
  implementations.
"""
from __future__ import annotations

import itertools
from functools import lru_cache

from hypothesis import given, settings
from hypothesis import strategies as st

from lockwright.core.dependency import manifest_set
from lockwright.core.dependency.constraints import VersionConstraint
from lockwright.core.dependency.models import Manifest, Specification
from lockwright.core.dependency.resolver import Resolution, resolve
from lockwright.core.lockfile.codec import LockfileCodec
from lockwright.core.sources.memory import MemorySource


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

NAMES = ["a", "b", "c", "d", "e"]
VERSIONS = ["1.0", "1.1", "2.0", "3.0"]
REQUIREMENTS = ["*", ">= 1.1", "< 2.0", "== 1.0", "~> 1.0", "!= 2.0"]

Catalog = dict[str, dict[str, dict[str, str]]]


@st.composite
def problems(draw: st.DrawFn) -> tuple[Catalog, dict[str, str]]:
    """Generate a catalog and the top-level requirements to resolve."""
    catalog: Catalog = {}
    for name in NAMES:
        others = st.sampled_from([n for n in NAMES if n != name])
        versions = draw(st.lists(st.sampled_from(VERSIONS), max_size=3, unique=True))
        catalog[name] = {
            v: draw(st.dictionaries(others, st.sampled_from(REQUIREMENTS), max_size=2))
            for v in versions
        }
    top = draw(
        st.dictionaries(st.sampled_from(NAMES), st.sampled_from(REQUIREMENTS), min_size=1, max_size=3)
    )
    return catalog, top


def _resolve(catalog: Catalog, top: dict[str, str], partial=()) -> Resolution:
    source = MemorySource("prop", catalog)
    spec = Specification(tuple(source.dependency(n, r) for n, r in top.items()))
    return resolve(spec, partial)


# ---------------------------------------------------------------------------
# Reference implementations
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def _constraint(text: str) -> VersionConstraint:
    return VersionConstraint(text)


def _solvable(catalog: Catalog, top: dict[str, str]) -> bool:
    """Enumerate every assignment (including "not installed") per name."""
    options = [[None, *catalog[name]] for name in NAMES]
    for choice in itertools.product(*options):
        chosen = dict(zip(NAMES, choice))

        def ok(name: str, requirement: str) -> bool:
            version = chosen[name]
            return version is not None and _constraint(requirement).satisfies(version)

        if not all(ok(n, r) for n, r in top.items()):
            continue
        if all(
            ok(dep, req)
            for name, version in chosen.items()
            if version is not None
            for dep, req in catalog[name][version].items()
        ):
            return True
    return False


def _reaches(manifests: list[Manifest], start: str, goal: str) -> bool:
    by_name = {m.name: m for m in manifests}
    seen, todo = set(), [start]
    while todo:
        name = todo.pop()
        if name == goal:
            return True
        if name in seen or name not in by_name:
            continue
        seen.add(name)
        todo.extend(d.name for d in by_name[name].dependencies)
    return False


# ---------------------------------------------------------------------------
# Resolver properties
# ---------------------------------------------------------------------------


class TestResolverProperties:
    """The resolver agrees with exhaustive search."""

    @given(problem=problems())
    @settings(max_examples=80, deadline=None)
    def test_sound_and_complete(self, problem: tuple[Catalog, dict[str, str]]) -> None:
        catalog, top = problem
        result = _resolve(catalog, top)
        assert result.correct == _solvable(catalog, top)
        if not result.correct:
            return

        by_name = {m.name: m for m in result.manifests}
        assert len(by_name) == len(result.manifests)
        for dep in result.dependencies:
            assert dep.satisfied_by(by_name[dep.name])
        for m in result.manifests:
            for dep in m.dependencies:
                assert dep.satisfied_by(by_name[dep.name])
            assert any(_reaches(list(result.manifests), n, m.name) for n in top)

    @given(problem=problems())
    @settings(max_examples=50, deadline=None)
    def test_deterministic(self, problem: tuple[Catalog, dict[str, str]]) -> None:
        catalog, top = problem
        first, second = _resolve(catalog, top), _resolve(catalog, top)
        assert first.manifests == second.manifests
        assert first.conflicts == second.conflicts

    @given(problem=problems())
    @settings(max_examples=50, deadline=None)
    def test_reusing_a_resolution_reproduces_it(
        self, problem: tuple[Catalog, dict[str, str]]
    ) -> None:
        catalog, top = problem
        result = _resolve(catalog, top)
        if result.correct:
            again = _resolve(catalog, top, partial=result.manifests)
            assert set(again.manifests) == set(result.manifests)


# ---------------------------------------------------------------------------
# Lockfile and manifest set properties
# ---------------------------------------------------------------------------


class TestLockfileProperties:
    """Serialization is canonical and round-trips."""

    @given(problem=problems())
    @settings(max_examples=50, deadline=None)
    def test_bounce_is_identity(self, problem: tuple[Catalog, dict[str, str]]) -> None:
        catalog, top = problem
        result = _resolve(catalog, top)
        if not result.correct:
            return
        codec = LockfileCodec()
        text = codec.serialize(result)
        assert codec.bounce(text) == text
        assert set(codec.parse(text).manifests) == set(result.manifests)

    @given(problem=problems(), seed=st.randoms(use_true_random=False))
    @settings(max_examples=50, deadline=None)
    def test_text_independent_of_manifest_order(self, problem, seed) -> None:
        catalog, top = problem
        result = _resolve(catalog, top)
        if not result.correct:
            return
        shuffled = list(result.manifests)
        seed.shuffle(shuffled)
        codec = LockfileCodec()
        assert codec.serialize(Resolution(result.dependencies, shuffled)) == codec.serialize(result)


class TestManifestSetProperties:
    """Ordering and stripping on resolved manifest sets."""

    @given(problem=problems())
    @settings(max_examples=50, deadline=None)
    def test_sort_puts_dependencies_first(self, problem: tuple[Catalog, dict[str, str]]) -> None:
        catalog, top = problem
        result = _resolve(catalog, top)
        if not result.correct:
            return
        ordered = manifest_set.sort(reversed(result.manifests))
        position = {m.name: i for i, m in enumerate(ordered)}
        for m in ordered:
            for dep in m.dependencies:
                cyclic = _reaches(ordered, dep.name, m.name)
                assert cyclic or position[dep.name] < position[m.name]

    @given(problem=problems(), data=st.data())
    @settings(max_examples=50, deadline=None)
    def test_deep_strip_matches_reference(self, problem, data) -> None:
        catalog, top = problem
        result = _resolve(catalog, top)
        if not result.correct:
            return
        names = data.draw(st.sets(st.sampled_from(NAMES), max_size=2))
        roots = list(top)

        by_name = {m.name: m for m in result.manifests}
        expected = {r for r in roots if r in by_name and r not in names}
        changed = True
        while changed:
            changed = False
            for name in list(expected):
                for dep in by_name[name].dependencies:
                    if dep.name in by_name and dep.name not in names and dep.name not in expected:
                        expected.add(dep.name)
                        changed = True

        kept = manifest_set.deep_strip(result.manifests, names, roots=roots)
        assert {m.name for m in kept} == expected
