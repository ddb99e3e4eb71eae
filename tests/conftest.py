"""Shared fixtures: keep every test away from the real home directory."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from wsm.utils.errors import set_debug_mode
from wsm.workspace import WorkspaceStore


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point config and root lookups at the test's temp directory."""
    monkeypatch.setenv("WSM_CONFIG", str(tmp_path / "wsm-config.toml"))
    monkeypatch.delenv("WORKSPACE_ROOT", raising=False)
    monkeypatch.delenv("WSM_DEBUG", raising=False)
    set_debug_mode(False)
    yield
    set_debug_mode(False)


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Workspace root; not created until the first workspace is."""
    return tmp_path / "root"


@pytest.fixture
def store(root: Path) -> WorkspaceStore:
    return WorkspaceStore(root)


@pytest.fixture
def repos(tmp_path: Path) -> dict[str, Path]:
    """Three repository directories outside the root."""
    src = tmp_path / "src"
    paths = {}
    for name in ("api", "web", "cli"):
        path = src / name
        path.mkdir(parents=True)
        (path / "README.md").write_text(f"# {name}\n")
        paths[name] = path.resolve()
    return paths
