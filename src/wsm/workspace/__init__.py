"""Workspace module: named directories of symlinks to repositories.

A workspace groups existing repository directories by linking them into
``<root>/<name>/``; the filesystem itself is the only state.
"""

from .errors import (
    AlreadyExistsError,
    InvalidNameError,
    NotASymlinkError,
    NotFoundError,
    WorkspaceError,
    WorkspaceIOError,
)
from .store import (
    HIDDEN_PREFIX,
    Link,
    WorkspaceStore,
    validate_name,
)

__all__ = [
    # Store
    "WorkspaceStore",
    "Link",
    "validate_name",
    "HIDDEN_PREFIX",
    # Errors
    "WorkspaceError",
    "InvalidNameError",
    "AlreadyExistsError",
    "NotFoundError",
    "NotASymlinkError",
    "WorkspaceIOError",
]
