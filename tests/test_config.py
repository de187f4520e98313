"""Tests for ProjectContext discovery and paths."""

from __future__ import annotations

from pathlib import Path

import pytest

from lockwright.config import (
    CACHE_DIR,
    DEFAULT_SPECFILE_NAME,
    INSTALL_DIR,
    SPECFILE_ENV_VAR,
    ProjectContext,
    default_specfile_name,
)
from lockwright.exceptions import ProjectNotFoundError


class TestDiscover:
    """Walking up the directory tree to the specfile."""

    def test_finds_specfile_in_start_directory(self, project_dir: Path) -> None:
        context = ProjectContext.discover(project_dir)
        assert context.project_path == project_dir.resolve()
        assert context.specfile_name == DEFAULT_SPECFILE_NAME

    def test_walks_up_from_subdirectory(self, project_dir: Path) -> None:
        nested = project_dir / "src" / "deep"
        nested.mkdir(parents=True)
        assert ProjectContext.discover(nested).project_path == project_dir.resolve()

    def test_custom_specfile_name(self, tmp_path: Path) -> None:
        (tmp_path / "Deps.yaml").write_text("dependencies: []\n")
        context = ProjectContext.discover(tmp_path, "Deps.yaml")
        assert context.lockfile_name == "Deps.yaml.lock"

    def test_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ProjectNotFoundError, match="Cannot find Missing-lockwright-spec.yaml!"):
            ProjectContext.discover(tmp_path, "Missing-lockwright-spec.yaml")

    def test_environment_overrides_specfile_name(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv(SPECFILE_ENV_VAR, "Env.yaml")
        assert default_specfile_name() == "Env.yaml"
        (tmp_path / "Env.yaml").write_text("")
        assert ProjectContext.discover(tmp_path).specfile_name == "Env.yaml"

    def test_default_name_without_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(SPECFILE_ENV_VAR, raising=False)
        assert default_specfile_name() == DEFAULT_SPECFILE_NAME


class TestPaths:
    """Derived project paths."""

    def test_paths(self, tmp_path: Path) -> None:
        context = ProjectContext(tmp_path)
        root = tmp_path.resolve()
        assert context.specfile_path == root / "Lockfile.yaml"
        assert context.lockfile_path == root / "Lockfile.yaml.lock"
        assert context.cache_path == root / CACHE_DIR
        assert context.install_path == root / INSTALL_DIR

    def test_resolve_path(self, tmp_path: Path) -> None:
        context = ProjectContext(tmp_path)
        assert context.resolve_path("index") == tmp_path.resolve() / "index"
        assert context.resolve_path(tmp_path / "abs") == tmp_path / "abs"

    def test_relative(self, tmp_path: Path) -> None:
        context = ProjectContext(tmp_path)
        assert context.relative(tmp_path / "a" / "b") == Path("a/b")
        assert context.relative(Path("/elsewhere")) == Path("/elsewhere")
