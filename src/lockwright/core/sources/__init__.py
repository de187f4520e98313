"""Pluggable manifest sources.

Re-exports the ``Source`` base class, the built-in ``IndexSource`` and
``MemorySource``, and the ``SourceRegistry`` used to rebuild sources from
specfiles and lockfiles.
"""

from lockwright.core.sources.base import Source
from lockwright.core.sources.index import IndexSource
from lockwright.core.sources.memory import MemorySource
from lockwright.core.sources.registry import SourceRegistry, default_source_registry

__all__ = [
    "Source",
    "IndexSource",
    "MemorySource",
    "SourceRegistry",
    "default_source_registry",
]
