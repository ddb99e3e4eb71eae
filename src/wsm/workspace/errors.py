"""Exceptions raised by the workspace store.

Every failure carries the offending name or path so the CLI can report it.
"""

from __future__ import annotations

from pathlib import Path


class WorkspaceError(Exception):
    """Base class for all workspace store failures."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class InvalidNameError(WorkspaceError):
    """A workspace or link name is not a single literal path segment."""


class AlreadyExistsError(WorkspaceError):
    """The workspace being created is already present."""


class NotFoundError(WorkspaceError):
    """A workspace or link entry does not exist."""


class NotASymlinkError(WorkspaceError):
    """A removal target exists but is not a symbolic link."""


class WorkspaceIOError(WorkspaceError):
    """An underlying filesystem call failed."""

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        original: OSError | None = None,
    ) -> None:
        super().__init__(message, path)
        self.original = original
