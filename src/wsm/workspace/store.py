"""Workspace store: validated CRUD over the root/workspace/link hierarchy.

Layout on disk::

    <root>/                     one directory per workspace
    <root>/<name>/              workspace directory
    <root>/<name>/<link_name>   symlink -> absolute canonical target path

The directory of symlinks is both the storage and the index; nothing is cached.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import NamedTuple

from .errors import (
    AlreadyExistsError,
    InvalidNameError,
    NotASymlinkError,
    NotFoundError,
    WorkspaceIOError,
)

logger = logging.getLogger(__name__)

HIDDEN_PREFIX = "."

_SEPARATORS = tuple(sep for sep in {"/", os.sep, os.altsep} if sep)


class Link(NamedTuple):
    """A symlink inside a workspace: its name and stored target."""

    name: str
    target: Path


def validate_name(name: str, label: str = "Workspace") -> None:
    """Check that ``name`` is a single, literal path segment.

    Raises:
        InvalidNameError: If the name is empty, contains a separator or NUL,
            or is a ``.``/``..`` reference.
    """
    if not name:
        raise InvalidNameError(f"{label} name cannot be empty", name)

    if any(sep in name for sep in _SEPARATORS) or "\0" in name or name in (".", ".."):
        raise InvalidNameError(
            f"Invalid {label.lower()} name '{name}'. "
            "Use a single path segment without separators or '..'",
            name,
        )


class WorkspaceStore:
    """Workspaces and their links under a fixed root directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """The root directory holding all workspaces."""
        return self._root

    def __repr__(self) -> str:
        return f"WorkspaceStore(root={str(self._root)!r})"

    def workspace_directory(self, name: str) -> Path:
        """Path of a workspace directory. No validation and no I/O."""
        return self._root / name

    def workspace_exists(self, name: str) -> bool:
        """Check whether a workspace directory is present."""
        return self.workspace_directory(name).is_dir()

    def create_workspace(
        self,
        name: str,
        initial_targets: list[str | Path] | None = None,
    ) -> Path:
        """Create a workspace, optionally linking initial targets into it.

        Targets are linked in order. The first failing target aborts the rest;
        the directory and any links added before it are kept.

        Args:
            name: Workspace name.
            initial_targets: Paths to link into the new workspace.

        Returns:
            The workspace directory.

        Raises:
            InvalidNameError: If the name is not a single path segment.
            AlreadyExistsError: If the workspace is already present.
            WorkspaceIOError: If the directory cannot be created.
        """
        validate_name(name)
        ws_dir = self.workspace_directory(name)

        if os.path.lexists(ws_dir):
            raise AlreadyExistsError(f"Workspace '{name}' already exists at {ws_dir}", ws_dir)

        try:
            ws_dir.mkdir(parents=True)
        except FileExistsError as e:
            raise AlreadyExistsError(f"Workspace '{name}' already exists at {ws_dir}", ws_dir) from e
        except OSError as e:
            raise WorkspaceIOError(f"Failed to create workspace directory {ws_dir}: {e}", ws_dir, e) from e
        logger.info(f"Created workspace directory: {ws_dir}")

        for target in initial_targets or []:
            self.add_link(name, target)

        return ws_dir

    def list_workspaces(self) -> list[str]:
        """Names of all workspaces, sorted. Empty if the root does not exist."""
        if not self._root.exists():
            return []

        try:
            with os.scandir(self._root) as entries:
                names = [
                    entry.name
                    for entry in entries
                    if not entry.name.startswith(HIDDEN_PREFIX) and entry.is_dir(follow_symlinks=False)
                ]
        except OSError as e:
            raise WorkspaceIOError(f"Failed to read workspace root {self._root}: {e}", self._root, e) from e

        return sorted(names)

    def list_links(self, name: str) -> list[Link]:
        """Symlinks inside a workspace, sorted by link name.

        Entries that are not symlinks are skipped.

        Raises:
            InvalidNameError: If the name is not a single path segment.
            NotFoundError: If the workspace does not exist.
            WorkspaceIOError: If the directory or a link cannot be read.
        """
        validate_name(name)
        ws_dir = self.workspace_directory(name)
        if not ws_dir.exists():
            raise NotFoundError(f"Workspace '{name}' does not exist", ws_dir)

        links = []
        try:
            with os.scandir(ws_dir) as entries:
                for entry in entries:
                    if entry.is_symlink():
                        links.append(Link(entry.name, Path(os.readlink(entry.path))))
        except OSError as e:
            raise WorkspaceIOError(f"Failed to read workspace {ws_dir}: {e}", ws_dir, e) from e

        links.sort(key=lambda link: link.name)
        return links

    def add_link(self, workspace_name: str, target_path: str | Path) -> bool:
        """Link a target into a workspace under the target's own name.

        An existing entry with the same name is left alone, even when it points
        somewhere else.

        Args:
            workspace_name: Workspace to link into.
            target_path: Existing path to link to. Stored in canonical form.

        Returns:
            True if a link was created, False if one was already present.

        Raises:
            InvalidNameError: If the workspace name is invalid or the target
                has no final path component.
            NotFoundError: If the workspace does not exist.
            WorkspaceIOError: If the target cannot be resolved or the link
                cannot be created.
        """
        validate_name(workspace_name)
        ws_dir = self.workspace_directory(workspace_name)
        if not ws_dir.exists():
            raise NotFoundError(f"Workspace '{workspace_name}' does not exist", ws_dir)

        try:
            abs_target = Path(target_path).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            original = e if isinstance(e, OSError) else None
            raise WorkspaceIOError(f"Failed to resolve path: {target_path}", target_path, original) from e

        if not abs_target.name:
            raise InvalidNameError(f"Invalid path: {abs_target} has no file name", abs_target)

        link_path = ws_dir / abs_target.name

        if os.path.lexists(link_path):
            if link_path.is_symlink() and Path(os.readlink(link_path)) != abs_target:
                logger.warning(
                    f"Link {link_path} already points to {os.readlink(link_path)}, "
                    f"not {abs_target}; keeping the existing link"
                )
            else:
                logger.info(f"Link {link_path} already exists, skipping")
            return False

        try:
            link_path.symlink_to(abs_target)
        except OSError as e:
            raise WorkspaceIOError(f"Failed to create symlink at {link_path}: {e}", link_path, e) from e

        logger.info(f"Linked {link_path} -> {abs_target}")
        return True

    def remove_link(self, workspace_name: str, link_name: str) -> None:
        """Remove a single symlink from a workspace. Its target is untouched.

        Raises:
            InvalidNameError: If either name is invalid.
            NotFoundError: If the link entry does not exist.
            NotASymlinkError: If the entry is a regular file or directory.
            WorkspaceIOError: If the link cannot be removed.
        """
        validate_name(workspace_name)
        validate_name(link_name, "Link")
        link_path = self.workspace_directory(workspace_name) / link_name

        try:
            mode = os.lstat(link_path).st_mode
        except FileNotFoundError as e:
            raise NotFoundError(
                f"Link '{link_name}' does not exist in workspace '{workspace_name}'", link_path
            ) from e
        except OSError as e:
            raise WorkspaceIOError(f"Failed to inspect {link_path}: {e}", link_path, e) from e

        if not stat.S_ISLNK(mode):
            raise NotASymlinkError(
                f"'{link_name}' is not a symlink in workspace '{workspace_name}'", link_path
            )

        try:
            link_path.unlink()
        except OSError as e:
            raise WorkspaceIOError(f"Failed to remove symlink {link_path}: {e}", link_path, e) from e
        logger.info(f"Removed link: {link_name}")

    def remove_workspace(self, name: str) -> None:
        """Delete a workspace directory and every link in it.

        Raises:
            InvalidNameError: If the name is invalid.
            NotFoundError: If the workspace does not exist.
            WorkspaceIOError: If removal fails.
        """
        validate_name(name)
        ws_dir = self.workspace_directory(name)
        # Symlinks under the root are not workspaces
        if ws_dir.is_symlink() or not ws_dir.is_dir():
            raise NotFoundError(f"Workspace '{name}' does not exist", ws_dir)

        try:
            shutil.rmtree(ws_dir)
        except OSError as e:
            raise WorkspaceIOError(f"Failed to remove workspace directory {ws_dir}: {e}", ws_dir, e) from e
        logger.info(f"Removed workspace: {name}")
