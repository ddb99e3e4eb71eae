"""Tests for the workspace store."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from wsm.workspace import (
    AlreadyExistsError,
    InvalidNameError,
    Link,
    NotASymlinkError,
    NotFoundError,
    WorkspaceIOError,
    WorkspaceStore,
    validate_name,
)


# ============== Name Validation Tests ==============


class TestValidateName:
    """Tests for the single-segment name rule."""

    @pytest.mark.parametrize("name", ["", "a/b", "/abs", "a/", "../x", "..", ".", "nul\0byte"])
    def test_invalid_names(self, name: str) -> None:
        """Empty, multi-segment and dot references are rejected."""
        with pytest.raises(InvalidNameError):
            validate_name(name)

    @pytest.mark.parametrize("name", ["a", "my-project", "with space", "...", ".hidden", "v1.2", "名前"])
    def test_valid_names(self, name: str) -> None:
        """Single literal segments pass."""
        validate_name(name)

    def test_error_carries_name(self) -> None:
        """The offending name is attached for diagnostics."""
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("a/b", "Link")
        assert exc_info.value.path == "a/b"
        assert "link name" in str(exc_info.value)

    def test_empty_name_message(self) -> None:
        with pytest.raises(InvalidNameError, match="cannot be empty"):
            validate_name("")


# ============== Workspace Tests ==============


class TestCreateWorkspace:
    """Tests for create_workspace."""

    def test_creates_directory_and_root(self, store: WorkspaceStore, root: Path) -> None:
        """The root is created as the parent of the first workspace."""
        assert not root.exists()

        ws_dir = store.create_workspace("alpha")

        assert ws_dir == root / "alpha"
        assert ws_dir.is_dir()
        assert list(ws_dir.iterdir()) == []

    def test_create_twice_fails(self, store: WorkspaceStore) -> None:
        """Second create fails and leaves the first directory unchanged."""
        ws_dir = store.create_workspace("alpha")
        (ws_dir / "notes.txt").write_text("keep me")

        with pytest.raises(AlreadyExistsError) as exc_info:
            store.create_workspace("alpha")

        assert exc_info.value.path == ws_dir
        assert (ws_dir / "notes.txt").read_text() == "keep me"

    def test_dangling_symlink_counts_as_existing(self, store: WorkspaceStore, root: Path) -> None:
        root.mkdir()
        (root / "alpha").symlink_to(root / "missing")

        with pytest.raises(AlreadyExistsError):
            store.create_workspace("alpha")

    def test_invalid_name_creates_nothing(self, store: WorkspaceStore, root: Path) -> None:
        """Validation happens before any mutation."""
        with pytest.raises(InvalidNameError):
            store.create_workspace("team/alpha")
        assert not root.exists()

    def test_with_initial_targets(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        """Initial targets are linked in the same call."""
        store.create_workspace("alpha", [repos["api"], repos["web"]])

        assert store.list_links("alpha") == [
            Link("api", repos["api"]),
            Link("web", repos["web"]),
        ]

    def test_partial_batch_is_kept(self, store: WorkspaceStore, repos: dict[str, Path], tmp_path: Path) -> None:
        """The first bad target aborts the rest without rolling back."""
        targets = [repos["api"], tmp_path / "does-not-exist", repos["web"]]

        with pytest.raises(WorkspaceIOError):
            store.create_workspace("alpha", targets)

        assert store.workspace_exists("alpha")
        assert [link.name for link in store.list_links("alpha")] == ["api"]


class TestListWorkspaces:
    """Tests for list_workspaces."""

    def test_missing_root_is_empty(self, store: WorkspaceStore, root: Path) -> None:
        assert store.list_workspaces() == []
        assert not root.exists()

    def test_sorted_and_hidden_excluded(self, store: WorkspaceStore, root: Path) -> None:
        """Directories b, a, .hidden list as a, b."""
        for name in ("b", "a", ".hidden"):
            (root / name).mkdir(parents=True)

        assert store.list_workspaces() == ["a", "b"]

    def test_skips_files_and_symlinked_directories(self, store: WorkspaceStore, root: Path, repos: dict[str, Path]) -> None:
        """Only real directories directly under the root are workspaces."""
        store.create_workspace("alpha")
        (root / "stray.txt").write_text("not a workspace")
        (root / "linked").symlink_to(repos["api"])

        assert store.list_workspaces() == ["alpha"]


class TestRemoveWorkspace:
    """Tests for remove_workspace."""

    def test_remove_deletes_links_not_targets(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        """Links go with the workspace; their targets stay."""
        store.create_workspace("alpha", [repos["api"]])

        store.remove_workspace("alpha")

        assert not store.workspace_directory("alpha").exists()
        assert (repos["api"] / "README.md").exists()
        with pytest.raises(NotFoundError):
            store.list_links("alpha")

    def test_remove_missing(self, store: WorkspaceStore) -> None:
        with pytest.raises(NotFoundError):
            store.remove_workspace("ghost")

    def test_symlink_under_root_is_not_a_workspace(
        self, store: WorkspaceStore, root: Path, repos: dict[str, Path]
    ) -> None:
        """A symlinked directory under the root is left alone."""
        root.mkdir()
        (root / "alias").symlink_to(repos["api"])

        with pytest.raises(NotFoundError):
            store.remove_workspace("alias")

        assert (root / "alias").is_symlink()
        assert (repos["api"] / "README.md").exists()

    def test_remove_invalid_name(self, store: WorkspaceStore, root: Path) -> None:
        """A parent reference never reaches rmtree."""
        store.create_workspace("alpha")
        with pytest.raises(InvalidNameError):
            store.remove_workspace("..")
        assert root.exists()


class TestWorkspaceDirectory:
    """Tests for workspace_directory and workspace_exists."""

    def test_pure_path(self, store: WorkspaceStore, root: Path) -> None:
        """No I/O: the path is computed even when nothing exists."""
        assert store.workspace_directory("alpha") == root / "alpha"
        assert not root.exists()

    def test_exists(self, store: WorkspaceStore) -> None:
        assert store.workspace_exists("alpha") is False
        store.create_workspace("alpha")
        assert store.workspace_exists("alpha") is True

    def test_root_is_exposed(self, store: WorkspaceStore, root: Path) -> None:
        assert store.root == root


# ============== Link Tests ==============


class TestAddLink:
    """Tests for add_link."""

    def test_creates_symlink_to_canonical_target(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        store.create_workspace("alpha")

        assert store.add_link("alpha", repos["api"]) is True

        link_path = store.workspace_directory("alpha") / "api"
        assert link_path.is_symlink()
        assert Path(os.readlink(link_path)) == repos["api"]

    def test_relative_target_is_resolved(
        self, store: WorkspaceStore, repos: dict[str, Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Relative paths are stored as absolute canonical paths."""
        store.create_workspace("alpha")
        monkeypatch.chdir(repos["api"])

        store.add_link("alpha", "../web")

        assert store.list_links("alpha") == [Link("web", repos["web"])]

    def test_symlinked_target_is_resolved(self, store: WorkspaceStore, repos: dict[str, Path], tmp_path: Path) -> None:
        """The link name comes from the canonical path, not the alias."""
        alias = tmp_path / "shortcut"
        alias.symlink_to(repos["cli"])
        store.create_workspace("alpha")

        store.add_link("alpha", alias)

        assert store.list_links("alpha") == [Link("cli", repos["cli"])]

    def test_tilde_is_a_literal_name(
        self, store: WorkspaceStore, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A relative path starting with '~' names a directory, not a home."""
        cwd = tmp_path / "cwd"
        (cwd / "~nosuchuser").mkdir(parents=True)
        (cwd / "~").mkdir()
        monkeypatch.chdir(cwd)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        store.create_workspace("alpha")

        assert store.add_link("alpha", "~nosuchuser") is True
        assert store.add_link("alpha", "~") is True

        assert store.list_links("alpha") == [
            Link("~", (cwd / "~").resolve()),
            Link("~nosuchuser", (cwd / "~nosuchuser").resolve()),
        ]

    def test_add_twice_is_noop(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        """Second add succeeds without a second entry."""
        store.create_workspace("alpha")

        assert store.add_link("alpha", repos["api"]) is True
        assert store.add_link("alpha", repos["api"]) is False

        assert store.list_links("alpha") == [Link("api", repos["api"])]

    def test_same_name_other_target_keeps_old_link(
        self,
        store: WorkspaceStore,
        repos: dict[str, Path],
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A different target with the same basename is skipped with a warning."""
        other_api = tmp_path / "fork" / "api"
        other_api.mkdir(parents=True)
        store.create_workspace("alpha", [repos["api"]])

        with caplog.at_level(logging.WARNING, logger="wsm.workspace.store"):
            assert store.add_link("alpha", other_api) is False

        assert store.list_links("alpha") == [Link("api", repos["api"])]
        assert "keeping the existing link" in caplog.text

    def test_existing_regular_entry_is_skipped(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        ws_dir = store.create_workspace("alpha")
        (ws_dir / "api").mkdir()

        assert store.add_link("alpha", repos["api"]) is False
        assert not (ws_dir / "api").is_symlink()

    def test_missing_workspace(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        with pytest.raises(NotFoundError):
            store.add_link("ghost", repos["api"])

    def test_missing_target(self, store: WorkspaceStore, tmp_path: Path) -> None:
        store.create_workspace("alpha")

        with pytest.raises(WorkspaceIOError) as exc_info:
            store.add_link("alpha", tmp_path / "nope")

        assert exc_info.value.path == tmp_path / "nope"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_target_without_name(self, store: WorkspaceStore) -> None:
        """The filesystem root has no final component to name the link."""
        store.create_workspace("alpha")

        with pytest.raises(InvalidNameError):
            store.add_link("alpha", "/")

    def test_logs_link_creation(
        self, store: WorkspaceStore, repos: dict[str, Path], caplog: pytest.LogCaptureFixture
    ) -> None:
        store.create_workspace("alpha")

        with caplog.at_level(logging.INFO, logger="wsm.workspace.store"):
            store.add_link("alpha", repos["web"])

        assert "Linked" in caplog.text


class TestListLinks:
    """Tests for list_links."""

    def test_only_symlinks_are_listed(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        """A symlink and a regular file give one entry."""
        ws_dir = store.create_workspace("alpha", [repos["web"]])
        (ws_dir / "notes.txt").write_text("todo")

        assert store.list_links("alpha") == [Link("web", repos["web"])]

    def test_sorted_by_name(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        store.create_workspace("alpha", [repos["web"], repos["api"], repos["cli"]])

        assert [link.name for link in store.list_links("alpha")] == ["api", "cli", "web"]

    def test_link_is_a_pair(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        store.create_workspace("alpha", [repos["api"]])

        name, target = store.list_links("alpha")[0]

        assert name == "api"
        assert target == repos["api"]

    def test_dangling_links_are_listed(self, store: WorkspaceStore, tmp_path: Path) -> None:
        """A link whose target vanished still shows its stored target."""
        gone = tmp_path / "gone"
        gone.mkdir()
        expected = gone.resolve()
        store.create_workspace("alpha", [gone])
        gone.rmdir()

        assert store.list_links("alpha") == [Link("gone", expected)]

    def test_empty_workspace(self, store: WorkspaceStore) -> None:
        store.create_workspace("alpha")
        assert store.list_links("alpha") == []

    def test_missing_workspace(self, store: WorkspaceStore) -> None:
        with pytest.raises(NotFoundError):
            store.list_links("ghost")

    def test_invalid_name(self, store: WorkspaceStore) -> None:
        with pytest.raises(InvalidNameError):
            store.list_links("a/b")


class TestRemoveLink:
    """Tests for remove_link."""

    def test_removes_only_the_link(self, store: WorkspaceStore, repos: dict[str, Path]) -> None:
        store.create_workspace("alpha", [repos["api"], repos["web"]])

        store.remove_link("alpha", "api")

        assert [link.name for link in store.list_links("alpha")] == ["web"]
        assert (repos["api"] / "README.md").exists()

    def test_regular_file_is_refused(self, store: WorkspaceStore) -> None:
        """Regular files are never deleted."""
        ws_dir = store.create_workspace("alpha")
        (ws_dir / "notes.txt").write_text("todo")

        with pytest.raises(NotASymlinkError):
            store.remove_link("alpha", "notes.txt")

        assert (ws_dir / "notes.txt").read_text() == "todo"

    def test_directory_is_refused(self, store: WorkspaceStore) -> None:
        ws_dir = store.create_workspace("alpha")
        (ws_dir / "build").mkdir()

        with pytest.raises(NotASymlinkError):
            store.remove_link("alpha", "build")

        assert (ws_dir / "build").is_dir()

    def test_dangling_link_is_removed(self, store: WorkspaceStore, tmp_path: Path) -> None:
        gone = tmp_path / "gone"
        gone.mkdir()
        store.create_workspace("alpha", [gone])
        gone.rmdir()

        store.remove_link("alpha", "gone")

        assert store.list_links("alpha") == []

    def test_missing_link(self, store: WorkspaceStore) -> None:
        store.create_workspace("alpha")

        with pytest.raises(NotFoundError, match="does not exist in workspace 'alpha'"):
            store.remove_link("alpha", "api")

    def test_missing_workspace(self, store: WorkspaceStore) -> None:
        with pytest.raises(NotFoundError):
            store.remove_link("ghost", "api")

    @pytest.mark.parametrize("workspace, link", [("a/b", "api"), ("alpha", "../api"), ("alpha", "")])
    def test_invalid_names(self, store: WorkspaceStore, workspace: str, link: str) -> None:
        store.create_workspace("alpha")
        with pytest.raises(InvalidNameError):
            store.remove_link(workspace, link)
