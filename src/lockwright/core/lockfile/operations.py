"""Lockfile operations: disk I/O and diffing.

Reading and writing are kept apart from the codec so the codec stays pure
text-in/text-out. ``write_lockfile`` writes to a temporary sibling and
renames it into place, so an interrupted write never leaves a truncated
lockfile behind.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from lockwright.core.dependency.resolver import Resolution
from lockwright.core.lockfile.codec import LockfileCodec


def read_lockfile(codec: LockfileCodec, path: Path) -> Resolution:
    """Read and parse a lockfile from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        LockfileError: If the file is not a valid lockfile.
    """
    return codec.parse(path.read_text(encoding="utf-8"))


def write_lockfile(path: Path, text: str) -> None:
    """Atomically replace *path* with *text*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp, "wb") as fh:
            fh.write(text.encode("utf-8"))
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def diff(old: Resolution, new: Resolution) -> dict[str, Any]:
    """Compare the manifests of two correct resolutions.

    - **added**: names present only in ``new``.
    - **removed**: names present only in ``old``.
    - **changed**: names in both whose version or source differs, as
      ``{"name", "old", "new"}`` dicts with version strings.

    Returns:
        Dict with keys 'added', 'removed', 'changed'; all name-sorted.
    """
    old_by_name = {m.name: m for m in old.require_correct()}
    new_by_name = {m.name: m for m in new.require_correct()}

    added = sorted(set(new_by_name) - set(old_by_name))
    removed = sorted(set(old_by_name) - set(new_by_name))
    changed: list[dict[str, str]] = []
    for name in sorted(set(old_by_name) & set(new_by_name)):
        before, after = old_by_name[name], new_by_name[name]
        if (
            str(before.version) != str(after.version)
            or before.source != after.source
        ):
            changed.append({
                "name": name,
                "old": str(before.version),
                "new": str(after.version),
            })

    return {"added": added, "removed": removed, "changed": changed}
