"""Directory index source.

An index is a directory holding one YAML file per package::

    # <index>/A.yaml
    versions:
      "2.0":
        dependencies:
          C: ">= 1"
      "1.0": {}

Version keys should be quoted so YAML does not read ``1.10`` as a float.
Dependencies of an indexed package are bound to the same index. Caching
writes a YAML snapshot of each manifest under the project cache directory.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from lockwright.core.dependency.models import Dependency, Manifest
from lockwright.core.sources.base import Source
from lockwright.exceptions import SourceUnavailableError

if TYPE_CHECKING:
    from lockwright.config import ProjectContext

logger = logging.getLogger(__name__)


class IndexSource(Source):
    """A source reading package versions from a directory of YAML files.

    Args:
        path: Index directory as written in the specfile. Relative paths
            are resolved against the project directory.
        context: The project context, used for path resolution and the
            cache directory.
    """

    kind = "index"

    def __init__(self, path: str, context: ProjectContext | None = None) -> None:
        self.path = str(path)
        self.context = context
        self._loaded: dict[str, list[Manifest]] = {}

    @property
    def root(self) -> Path:
        """The index directory on disk."""
        if self.context is None:
            return Path(self.path)
        return self.context.resolve_path(self.path)

    def lock_options(self) -> dict[str, str]:
        return {"path": self.path}

    @classmethod
    def from_lock_options(
        cls, options: Mapping[str, str], context: ProjectContext | None = None
    ) -> IndexSource:
        return cls(options["path"], context)

    def _read_index(self, name: str) -> dict[str, Any]:
        root = self.root
        if not root.is_dir():
            raise SourceUnavailableError(f"Index directory not found: {root}")
        index_file = root / f"{name}.yaml"
        if not index_file.is_file():
            return {}
        try:
            data = yaml.safe_load(index_file.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise SourceUnavailableError(f"Cannot read index for {name!r}: {exc}") from exc
        if not isinstance(data, dict):
            raise SourceUnavailableError(f"Index for {name!r} is not a mapping")
        return data

    def _manifests(self, name: str) -> list[Manifest]:
        if name not in self._loaded:
            versions = self._read_index(name).get("versions") or {}
            if not isinstance(versions, dict):
                raise SourceUnavailableError(f"Index for {name!r} has no versions mapping")
            manifests = []
            for version, entry in versions.items():
                deps = (entry.get("dependencies") if isinstance(entry, dict) else None) or {}
                if not isinstance(deps, dict):
                    logger.warning(
                        "Skipping %s@%s in %s: dependencies must be a mapping",
                        name, version, self,
                    )
                    continue
                try:
                    manifests.append(self.manifest(name, str(version), deps))
                except ValueError as exc:
                    logger.warning("Skipping %s@%s in %s: %s", name, version, self, exc)
            manifests.sort(key=lambda m: m.version, reverse=True)
            self._loaded[name] = manifests
        return self._loaded[name]

    def candidates(self, dependency: Dependency) -> list[Manifest]:
        return list(self._manifests(dependency.name))

    def cache(self, manifests: list[Manifest]) -> None:
        if self.context is None:
            logger.debug("No project context for %s; skipping cache", self)
            return
        target = self.context.cache_path / self.kind
        try:
            target.mkdir(parents=True, exist_ok=True)
            for manifest in manifests:
                snapshot = {
                    "name": manifest.name,
                    "version": str(manifest.version),
                    "dependencies": {
                        dep.name: dep.requirement.canonical for dep in manifest.dependencies
                    },
                }
                out = target / f"{manifest.name}-{manifest.version}.yaml"
                out.write_text(yaml.safe_dump(snapshot, sort_keys=True), encoding="utf-8")
                logger.debug("Cached %s to %s", manifest, self.context.relative(out))
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot cache manifests from {self}: {exc}") from exc
