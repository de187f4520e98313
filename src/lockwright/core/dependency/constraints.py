"""Versions and version constraints for dependency requirements.

This module provides the requirement predicate attached to every
``Dependency``. The grammar is deliberately small: it covers the operator
families used by the common package ecosystems without tying the resolver
to any one of them.

Supported atoms (comma-separated atoms form a conjunction):

- Comparison: ``==``, ``!=``, ``>=``, ``<=``, ``>``, ``<`` (``=`` and a bare
  version both mean ``==``).
- Pessimistic: ``~> 1.2`` means ``>= 1.2, < 2``; ``~> 1.2.3`` means
  ``>= 1.2.3, < 1.3``.
- Caret: ``^1.2.3`` keeps the major version (major.minor when major is 0).
- Tilde: ``~1.2.3`` keeps major.minor.
- Wildcard: ``*`` or the empty string accepts every version.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Version: ordered, dotted release with optional pre-release
# ---------------------------------------------------------------------------

_VERSION_RE = re.compile(
    r"^(?P<release>\d+(?:\.\d+)*)"
    r"(?:-(?P<pre>[0-9A-Za-z\-.]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-.]+))?$"
)


def _pre_key(pre: str | None) -> tuple:
    # A release sorts after all of its pre-releases.
    if pre is None:
        return (1,)
    parts = []
    for ident in pre.split("."):
        if ident.isdigit():
            parts.append((0, int(ident), ""))
        else:
            parts.append((1, 0, ident))
    return (0, tuple(parts))


@dataclass(frozen=True, eq=False)
class Version:
    """A parsed version string.

    Release segments compare numerically and missing trailing segments
    count as zero, so ``1.0`` and ``1.0.0`` are equal. ``str()`` returns
    the text exactly as authored.

    Attributes:
        raw: The version text (e.g., "2.10.3", "1.0.0-beta.1").
    """

    raw: str
    release: tuple[int, ...] = field(init=False, repr=False)
    pre: str | None = field(init=False, repr=False)

    def __post_init__(self) -> None:
        m = _VERSION_RE.match(self.raw.strip())
        if not m:
            raise ValueError(f"Invalid version: {self.raw!r}")
        object.__setattr__(self, "raw", self.raw.strip())
        object.__setattr__(
            self, "release", tuple(int(p) for p in m.group("release").split("."))
        )
        object.__setattr__(self, "pre", m.group("pre"))

    @property
    def key(self) -> tuple:
        """Sort key: trailing zero release segments are ignored."""
        release = list(self.release)
        while len(release) > 1 and release[-1] == 0:
            release.pop()
        return (tuple(release), _pre_key(self.pre))

    def padded(self, width: int = 3) -> tuple[int, ...]:
        """Return the release tuple zero-padded to at least *width* segments."""
        return self.release + (0,) * max(0, width - len(self.release))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Version) and self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __lt__(self, other: Version) -> bool:
        return self.key < other.key

    def __le__(self, other: Version) -> bool:
        return self.key <= other.key

    def __gt__(self, other: Version) -> bool:
        return self.key > other.key

    def __ge__(self, other: Version) -> bool:
        return self.key >= other.key

    def __str__(self) -> str:
        return self.raw


def parse_version(version: str | Version) -> Version:
    """Coerce a version string into a ``Version``."""
    if isinstance(version, Version):
        return version
    return Version(version)


# ---------------------------------------------------------------------------
# VersionConstraint: declarative version requirement
# ---------------------------------------------------------------------------

_CONSTRAINT_ATOM_RE = re.compile(
    r"^\s*(?P<op>~>|==|!=|>=|<=|>|<|=|\^|~)?\s*"
    r"(?P<ver>\d+(?:\.\d+)*(?:-[0-9A-Za-z\-.]+)?(?:\+[0-9A-Za-z\-.]+)?)\s*$"
)

_ANY = "*"


def _bump(release: tuple[int, ...]) -> tuple[int, ...]:
    """Upper bound for a pessimistic constraint on *release*."""
    if len(release) == 1:
        return (release[0] + 1,)
    head = release[:-1]
    return head[:-1] + (head[-1] + 1,)


@dataclass(frozen=True, eq=False)
class VersionConstraint:
    """A version constraint: a conjunction of comparison atoms.

    Constraints compare and hash by their canonical text, so
    ``VersionConstraint(">=1.0")`` equals ``VersionConstraint(">= 1.0")``.

    Attributes:
        raw: The constraint text as authored.
    """

    raw: str = _ANY
    atoms: tuple[tuple[str, Version], ...] = field(
        init=False, repr=False
    )

    def __post_init__(self) -> None:
        stripped = self.raw.strip()
        atoms: list[tuple[str, Version]] = []
        if stripped not in ("", _ANY):
            for text in stripped.split(","):
                if not text.strip():
                    continue
                m = _CONSTRAINT_ATOM_RE.match(text)
                if not m:
                    raise ValueError(f"Invalid constraint atom: {text.strip()!r}")
                op = m.group("op") or "=="
                if op == "=":
                    op = "=="
                atoms.append((op, Version(m.group("ver"))))
        object.__setattr__(self, "atoms", tuple(atoms))

    @classmethod
    def any(cls) -> VersionConstraint:
        """Return the constraint accepting every version."""
        return cls(_ANY)

    @property
    def canonical(self) -> str:
        """Normalized text: ``op version`` atoms joined by ``, ``."""
        if not self.atoms:
            return _ANY
        return ", ".join(f"{op} {ver}" for op, ver in self.atoms)

    def satisfies(self, version: str | Version) -> bool:
        """Check whether *version* satisfies every atom of this constraint.

        Args:
            version: A version string or ``Version``.

        Returns:
            True if the version satisfies all atoms.

        Raises:
            ValueError: If *version* is not a valid version string.
        """
        ver = parse_version(version)
        return all(self._atom_satisfies(op, target, ver) for op, target in self.atoms)

    @staticmethod
    def _atom_satisfies(op: str, target: Version, ver: Version) -> bool:
        if op == "==":
            return ver == target
        elif op == "!=":
            return ver != target
        elif op == ">=":
            return ver >= target
        elif op == "<=":
            return ver <= target
        elif op == ">":
            return ver > target
        elif op == "<":
            return ver < target
        elif op == "~>":
            upper = _bump(target.release)
            return ver >= target and ver.key[0] < upper
        elif op == "^":
            t, v = target.padded(), ver.padded()
            if t[0] == 0:
                return v[:2] == t[:2] and ver >= target
            return v[0] == t[0] and ver >= target
        elif op == "~":
            t, v = target.padded(), ver.padded()
            return v[:2] == t[:2] and ver >= target
        else:  # pragma: no cover
            raise ValueError(f"Unknown operator: {op!r}")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, VersionConstraint) and self.canonical == other.canonical

    def __hash__(self) -> int:
        return hash(self.canonical)

    def __str__(self) -> str:
        return self.canonical

    def __repr__(self) -> str:
        return f"VersionConstraint({self.canonical!r})"
