"""Shared fixtures for lockfile tests."""

from __future__ import annotations

import pytest

from lockwright.core.dependency.models import Specification
from lockwright.core.dependency.resolver import Resolution, resolve
from lockwright.core.sources.memory import MemorySource


@pytest.fixture
def resolution(main_source: MemorySource) -> Resolution:
    """Resolution of ``A >= 1.0`` and ``B``: A@2.0, B@1.0, C@2.0."""
    spec = Specification((main_source.dependency("A", ">= 1.0"), main_source.dependency("B")))
    return resolve(spec)
