"""Lockfile codec: canonical serialization and parsing of resolutions.

The lockfile is a JSON document::

    {
      "dependencies": [{"name": "A", "requirement": ">= 1.0", "source": 0}],
      "generated_by": "lockwright",
      "lockfile_version": 1,
      "sources": [
        {
          "manifests": [
            {"dependencies": [], "name": "C", "version": "2.0"},
            {"dependencies": [{"name": "C", "requirement": ">= 1", "source": 0}],
             "name": "A", "version": "2.0"}
          ],
          "options": {"path": "vendor/index"},
          "type": "index"
        }
      ]
    }

Determinism guarantee: sources are ordered by ``(type, options)``; the
manifest set is ordered by name and then topologically, and each source
lists its manifests in that order; top-level dependencies are ordered by
name; every dependency refers to its source by position. Object keys are
sorted. The output therefore depends only on the resolution's content,
which is what makes the round-trip (bounce) check meaningful.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from lockwright.core.dependency import manifest_set
from lockwright.core.dependency.constraints import VersionConstraint
from lockwright.core.dependency.models import Dependency, Manifest
from lockwright.core.dependency.resolver import Resolution
from lockwright.core.sources.base import Source
from lockwright.core.sources.registry import SourceRegistry, default_source_registry
from lockwright.exceptions import LockfileError, RoundTripInconsistencyError

if TYPE_CHECKING:
    from lockwright.config import ProjectContext

logger = logging.getLogger(__name__)

LOCKFILE_VERSION: int = 1
GENERATED_BY: str = "lockwright"


class LockfileCodec:
    """Serialize resolutions to lockfile text and parse them back.

    Args:
        known_sources: Source instances to reuse when a lockfile names a
            source with the same identity (typically the specification's
            sources, so caches already held by them are kept).
        registry: Source types used to rebuild sources that are not known.
        context: Project context passed to rebuilt sources.
    """

    def __init__(
        self,
        known_sources: Iterable[Source] = (),
        registry: SourceRegistry | None = None,
        context: ProjectContext | None = None,
    ) -> None:
        self._known = {s.identity: s for s in known_sources}
        self._registry = registry or default_source_registry()
        self._context = context

    # -- Serialization ------------------------------------------------------

    def to_dict(self, resolution: Resolution) -> dict[str, Any]:
        """Convert a correct resolution to the lockfile document.

        Raises:
            UnresolvableError: If the resolution is not correct.
        """
        manifests = resolution.require_correct()
        ordered = manifest_set.sort(sorted(manifests, key=lambda m: m.name))
        sources = sorted(resolution.sources, key=lambda s: s.identity)
        position = {s: i for i, s in enumerate(sources)}

        def _dep(dep: Dependency) -> dict[str, Any]:
            return {
                "name": dep.name,
                "requirement": dep.requirement.canonical,
                "source": position[dep.source],
            }

        source_entries = []
        for source in sources:
            source_entries.append({
                "type": source.kind,
                "options": dict(sorted(source.lock_options().items())),
                "manifests": [
                    {
                        "name": m.name,
                        "version": str(m.version),
                        "dependencies": [_dep(d) for d in m.dependencies],
                    }
                    for m in ordered
                    if m.source == source
                ],
            })

        return {
            "lockfile_version": LOCKFILE_VERSION,
            "generated_by": GENERATED_BY,
            "sources": source_entries,
            "dependencies": [
                _dep(d) for d in sorted(resolution.dependencies, key=lambda d: d.name)
            ],
        }

    def serialize(self, resolution: Resolution) -> str:
        """Serialize a correct resolution to canonical lockfile text."""
        return json.dumps(self.to_dict(resolution), indent=2, sort_keys=True) + "\n"

    # -- Parsing ------------------------------------------------------------

    def _source(self, kind: str, options: dict[str, str]) -> Source:
        try:
            built = self._registry.build(kind, options, self._context)
        except KeyError as exc:
            raise LockfileError(f"Unknown source type or option: {exc}") from exc
        return self._known.get(built.identity, built)

    def from_dict(self, data: dict[str, Any]) -> Resolution:
        """Rebuild a resolution from a lockfile document.

        Raises:
            LockfileError: If the document is malformed.
        """
        try:
            version = data.get("lockfile_version")
            if version != LOCKFILE_VERSION:
                raise LockfileError(f"Unsupported lockfile version: {version!r}")
            entries = data["sources"]
            sources = [
                self._source(str(e["type"]), {str(k): str(v) for k, v in e["options"].items()})
                for e in entries
            ]

            def _dep(entry: dict[str, Any]) -> Dependency:
                index = entry["source"]
                if not isinstance(index, int) or not 0 <= index < len(sources):
                    raise LockfileError(f"Dangling source index: {index!r}")
                return Dependency(
                    name=entry["name"],
                    requirement=VersionConstraint(entry["requirement"]),
                    source=sources[index],
                )

            manifests: list[Manifest] = []
            for source, entry in zip(sources, entries):
                for m in entry["manifests"]:
                    manifests.append(Manifest(
                        name=m["name"],
                        version=m["version"],
                        source=source,
                        dependencies=tuple(_dep(d) for d in m["dependencies"]),
                    ))
            dependencies = tuple(_dep(d) for d in data["dependencies"])
            manifest_set.ManifestSet(manifests)
        except LockfileError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise LockfileError(f"Malformed lockfile: {exc}") from exc
        return Resolution(dependencies, tuple(manifests))

    def parse(self, text: str) -> Resolution:
        """Parse lockfile text into a resolution.

        Raises:
            LockfileError: If the text is not a valid lockfile.
        """
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise LockfileError(f"Lockfile is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise LockfileError("Lockfile must be a JSON object")
        return self.from_dict(data)

    # -- Round trip ---------------------------------------------------------

    def bounce(self, text: str) -> str:
        """Parse *text* and serialize the result again."""
        return self.serialize(self.parse(text))

    def ensure_round_trip(self, text: str, name: str = "lockfile") -> None:
        """Check that *text* survives a parse/serialize round trip unchanged.

        Raises:
            RoundTripInconsistencyError: If the bounced text differs.
        """
        logger.debug("Bouncing %s", name)
        bounced = self.bounce(text)
        if bounced != text:
            logger.debug("lockfile_text:\n%s", text)
            logger.debug("bounced_lockfile_text:\n%s", bounced)
            raise RoundTripInconsistencyError(f"Cannot bounce {name}!")
