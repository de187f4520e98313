"""Shared fixtures for lockwright tests."""

from __future__ import annotations

import pathlib

import pytest

from lockwright.core.sources.memory import MemorySource


SCENARIO_CATALOG = {
    "A": {"1.0": {}, "2.0": {"C": ">= 1"}},
    "B": {"1.0": {}},
    "C": {"1.0": {}, "2.0": {}},
}

SPECFILE_TEXT = """\
sources:
  main:
    type: index
    path: index
dependencies:
  - name: A
    requirement: ">= 1.0"
  - B
"""

INDEX_FILES = {
    "A.yaml": (
        "versions:\n"
        '  "1.0": {}\n'
        '  "2.0":\n'
        "    dependencies:\n"
        '      C: ">= 1"\n'
    ),
    "B.yaml": 'versions:\n  "1.0": {}\n',
    "C.yaml": 'versions:\n  "1.0": {}\n  "2.0": {}\n',
}


@pytest.fixture
def main_source() -> MemorySource:
    """A memory source holding A (1.0, 2.0 -> C >= 1), B 1.0 and C (1.0, 2.0)."""
    return MemorySource("main", SCENARIO_CATALOG)


@pytest.fixture
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a project with a YAML specfile and an on-disk package index.

    The index mirrors the ``main_source`` catalog; the specfile asks for
    ``A >= 1.0`` and ``B``.
    """
    (tmp_path / "Lockfile.yaml").write_text(SPECFILE_TEXT)
    index = tmp_path / "index"
    index.mkdir()
    for name, text in INDEX_FILES.items():
        (index / name).write_text(text)
    return tmp_path
