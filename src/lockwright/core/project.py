"""Project workflows: resolve, update, fetch and clean.

``Project`` ties the core together for one ``ProjectContext``:

- ``resolve()`` re-resolves only when the specfile drifted from the lock,
  reusing the locked subgraphs of unchanged dependencies.
- ``update(names)`` re-resolves the named packages against an unchanged
  specfile.
- ``fetch()`` resolves, then asks each source to cache its manifests.
- ``clean()`` removes the cache, installed directories and the lockfile.

Write policy: a lockfile is written only for a correct resolution whose
text survives the bounce check. A failed resolution or bounce leaves any
existing lockfile untouched.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lockwright.config import ProjectContext
from lockwright.core.dependency import manifest_set
from lockwright.core.dependency.models import Specification
from lockwright.core.dependency.resolver import Resolution, Resolver, ResolverOptions
from lockwright.core.dependency.spec_change_set import SpecChangeSet
from lockwright.core.lockfile.codec import LockfileCodec
from lockwright.core.lockfile.operations import diff, read_lockfile, write_lockfile
from lockwright.core.sources.registry import SourceRegistry, default_source_registry
from lockwright.core.specfile import read_specfile
from lockwright.exceptions import DivergedSpecError, MissingLockError

logger = logging.getLogger(__name__)


class LockStatus(str, Enum):
    """What a resolve or update call did to the lockfile."""

    WRITTEN = "written"
    UNCHANGED = "unchanged"
    UNRESOLVED = "unresolved"


@dataclass
class LockOutcome:
    """Result of a resolve or update workflow.

    Attributes:
        status: Whether the lockfile was written, left alone because the
            specfile is unchanged, or left alone because resolution failed.
        resolution: The new resolution (or the existing lock when
            unchanged).
        text: The lockfile text that was written, if any.
        changes: Manifest diff against the previous lock, if there was one.
    """

    status: LockStatus
    resolution: Resolution
    text: str | None = None
    changes: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.status is not LockStatus.UNRESOLVED


class Project:
    """Resolution workflows for one project.

    Args:
        context: The project paths.
        spec_provider: Callable returning the current ``Specification``.
            Defaults to reading the YAML specfile.
        registry: Source types for the specfile and lockfile.
        resolver_options: Options for the ``Resolver``.
        codec_class: Lockfile codec to use.
    """

    def __init__(
        self,
        context: ProjectContext,
        *,
        spec_provider: Callable[[], Specification] | None = None,
        registry: SourceRegistry | None = None,
        resolver_options: ResolverOptions | None = None,
        codec_class: type[LockfileCodec] = LockfileCodec,
    ) -> None:
        self.context = context
        self.registry = registry or default_source_registry()
        self.resolver = Resolver(resolver_options)
        self.codec_class = codec_class
        self._spec_provider = spec_provider or (
            lambda: read_specfile(self.context, self.registry)
        )

    # -- Loading ------------------------------------------------------------

    def read_spec(self) -> Specification:
        return self._spec_provider()

    def codec(self, spec: Specification) -> LockfileCodec:
        """Build a codec that reuses *spec*'s source instances."""
        return self.codec_class(
            known_sources=spec.sources, registry=self.registry, context=self.context
        )

    def load_lock(self, codec: LockfileCodec) -> Resolution | None:
        """Parse the existing lockfile, or return None if there is none."""
        path = self.context.lockfile_path
        if not path.exists():
            return None
        lock = read_lockfile(codec, path)
        logger.debug("Precaching Sources:")
        for source in lock.sources:
            logger.debug("  %s", source)
        return lock

    # -- Workflows ----------------------------------------------------------

    def resolve(self, force: bool = False) -> LockOutcome:
        """Bring the lockfile in line with the specfile.

        Args:
            force: Ignore the existing lockfile and resolve from scratch.
        """
        spec = self.read_spec()
        codec = self.codec(spec)
        previous = None if force else self.load_lock(codec)
        if previous is None:
            partial = []
        else:
            changes = SpecChangeSet(spec, previous)
            if changes.same():
                logger.debug("The specfile is unchanged: nothing to do.")
                return LockOutcome(LockStatus.UNCHANGED, previous)
            partial = changes.analyze()
        resolution = self.resolver.resolve(spec, partial)
        return self._commit(codec, resolution, previous)

    def update(self, names: Iterable[str]) -> LockOutcome:
        """Re-resolve the named packages, keeping everything else locked.

        Raises:
            MissingLockError: If there is no lockfile.
            DivergedSpecError: If the specfile changed since the lock.
        """
        names = list(names)
        if not self.context.lockfile_path.exists():
            raise MissingLockError("Lockfile missing!")
        spec = self.read_spec()
        codec = self.codec(spec)
        previous = self.load_lock(codec)
        if not SpecChangeSet(spec, previous).same():
            raise DivergedSpecError("Cannot update when the specfile has been changed.")
        locked = previous.require_correct()
        unknown = [n for n in names if all(m.name != n for m in locked)]
        if unknown:
            logger.warning("Not in the lockfile: %s", ", ".join(unknown))
        partial = manifest_set.deep_strip(
            locked, names, roots=[d.name for d in previous.dependencies]
        )
        resolution = self.resolver.resolve(spec, partial)
        return self._commit(codec, resolution, previous)

    def fetch(self) -> Resolution:
        """Resolve, then cache every manifest through its source.

        Each source's ``cache`` is called once, with all of its manifests
        in dependency order.

        Raises:
            UnresolvableError: If the dependencies cannot be resolved.
            SourceUnavailableError: If a source fails to cache.
        """
        resolution = self.resolve().resolution
        manifests = manifest_set.sort(resolution.require_correct())
        for source in resolution.sources:
            owned = [m for m in manifests if m.source == source]
            if owned:
                logger.debug("Caching %d manifest(s) from %s", len(owned), source)
                source.cache(owned)
        return resolution

    def clean(self) -> None:
        """Delete the cache, installed package directories and the lockfile."""
        ctx = self.context
        if ctx.cache_path.exists():
            logger.debug("Deleting %s", ctx.relative(ctx.cache_path))
            shutil.rmtree(ctx.cache_path)
        if ctx.install_path.exists():
            for child in ctx.install_path.iterdir():
                if child.is_dir():
                    logger.debug("Deleting %s", ctx.relative(child))
                    shutil.rmtree(child)
        if ctx.lockfile_path.exists():
            logger.debug("Deleting %s", ctx.relative(ctx.lockfile_path))
            ctx.lockfile_path.unlink()

    # -- Internals ----------------------------------------------------------

    def _commit(
        self,
        codec: LockfileCodec,
        resolution: Resolution,
        previous: Resolution | None,
    ) -> LockOutcome:
        if not resolution.correct:
            logger.info("Could not resolve the dependencies.")
            return LockOutcome(LockStatus.UNRESOLVED, resolution)
        text = codec.serialize(resolution)
        codec.ensure_round_trip(text, self.context.lockfile_name)
        write_lockfile(self.context.lockfile_path, text)
        changes = diff(previous, resolution) if previous is not None else None
        return LockOutcome(LockStatus.WRITTEN, resolution, text, changes)
