"""Lockfile: canonical, round-trip-stable persistence of resolutions.

The package is split into focused submodules:

- ``codec``: ``LockfileCodec`` with ``serialize``, ``parse`` and the
  ``bounce`` / ``ensure_round_trip`` checks.
- ``operations``: reading and atomically writing lockfiles, and ``diff``.
"""

from lockwright.core.lockfile.codec import (
    GENERATED_BY,
    LOCKFILE_VERSION,
    LockfileCodec,
)
from lockwright.core.lockfile.operations import (
    diff,
    read_lockfile,
    write_lockfile,
)

__all__ = [
    "GENERATED_BY",
    "LOCKFILE_VERSION",
    "LockfileCodec",
    "diff",
    "read_lockfile",
    "write_lockfile",
]
