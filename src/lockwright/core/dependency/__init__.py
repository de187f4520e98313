"""Dependency model, manifest set algebra and backtracking resolution.

All public names are re-exported here so callers can write
``from lockwright.core.dependency import Resolver``.

Overview
--------
- ``constraints``: ``Version`` and ``VersionConstraint``.
- ``models``: ``Dependency``, ``Manifest`` and ``Specification``.
- ``manifest_set``: ``sort``, ``deep_strip``, ``deep_keep``, ``shallow_strip``.
- ``resolver``: ``Resolver``, ``ResolverOptions`` and ``Resolution``.
- ``spec_change_set``: ``SpecChangeSet`` and ``ChangeKind``.
"""

from lockwright.core.dependency.constraints import (
    Version,
    VersionConstraint,
    parse_version,
)
from lockwright.core.dependency.models import (
    Dependency,
    Manifest,
    Specification,
    unique_sources,
)
from lockwright.core.dependency.manifest_set import (
    ManifestSet,
    deep_keep,
    deep_strip,
    shallow_strip,
    sort,
)
from lockwright.core.dependency.resolver import (
    Resolution,
    Resolver,
    ResolverOptions,
    ReuseMode,
    resolve,
)
from lockwright.core.dependency.spec_change_set import (
    ChangeKind,
    SpecChangeSet,
)

__all__ = [
    "Version",
    "VersionConstraint",
    "parse_version",
    "Dependency",
    "Manifest",
    "Specification",
    "unique_sources",
    "ManifestSet",
    "deep_keep",
    "deep_strip",
    "shallow_strip",
    "sort",
    "Resolution",
    "Resolver",
    "ResolverOptions",
    "ReuseMode",
    "resolve",
    "ChangeKind",
    "SpecChangeSet",
]
