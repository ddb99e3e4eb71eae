"""Error handling utilities for the wsm CLI.

Provides consistent error formatting with:
- Human-friendly messages
- Suggested fixes
- Hidden stack traces (unless debug mode)
"""

from __future__ import annotations

import os
import sys
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from rich.markup import escape

from ..workspace.errors import (
    AlreadyExistsError,
    InvalidNameError,
    NotASymlinkError,
    NotFoundError,
    WorkspaceError,
    WorkspaceIOError,
)

if TYPE_CHECKING:
    from rich.console import Console

# Debug mode enabled by WSM_DEBUG=1 or --debug flag
_debug_mode = os.environ.get("WSM_DEBUG", "0") == "1"


class ErrorCategory(str, Enum):
    """Categories of errors for consistent formatting."""

    NAME = "name"  # Invalid workspace or link name
    EXISTS = "exists"  # Creation target already present
    NOT_FOUND = "not_found"  # Workspace or link missing
    WRONG_KIND = "wrong_kind"  # Entry is not a symlink
    FILE = "file"  # Filesystem failures
    SHELL = "shell"  # Activation shell could not start
    INTERNAL = "internal"  # Internal/unexpected errors


# Categories whose stack trace is worth offering
_TRACEABLE = {ErrorCategory.FILE, ErrorCategory.SHELL, ErrorCategory.INTERNAL}


@dataclass
class ErrorInfo:
    """Structured error information for consistent display."""

    message: str
    category: ErrorCategory
    suggestion: str | None = None
    details: str | None = None
    original_error: Exception | None = None


def set_debug_mode(enabled: bool) -> None:
    """Enable or disable debug mode for verbose error output."""
    global _debug_mode
    _debug_mode = enabled


def is_debug_mode() -> bool:
    """Check if debug mode is enabled."""
    return _debug_mode


def format_error(error: ErrorInfo, console: Console) -> None:
    """Format and display an error with consistent styling.

    Args:
        error: Structured error information
        console: Rich console for output
    """
    console.print(f"[bold red]Error:[/bold red] {escape(error.message)}", highlight=False)

    if error.details:
        if _debug_mode or len(error.details) < 200:
            console.print(f"[dim]{escape(error.details)}[/dim]", highlight=False)

    if error.suggestion:
        console.print()
        console.print(f"[yellow]Suggestion:[/yellow] {escape(error.suggestion)}")

    if _debug_mode and error.original_error:
        console.print()
        console.print("[dim]Stack trace (debug mode):[/dim]")
        tb_lines = traceback.format_exception(
            type(error.original_error),
            error.original_error,
            error.original_error.__traceback__,
        )
        for line in tb_lines:
            console.print(f"[dim]{escape(line.rstrip())}[/dim]", highlight=False)

    # Hint about debug mode
    if not _debug_mode and error.original_error and error.category in _TRACEABLE:
        console.print()
        console.print("[dim]Set WSM_DEBUG=1 or use --debug for more details[/dim]")


def error_invalid_name(name: str, message: str, original: Exception | None = None) -> ErrorInfo:
    """Create error info for a name that is not a single path segment."""
    return ErrorInfo(
        message=message,
        category=ErrorCategory.NAME,
        suggestion="Names must be a single path segment, e.g. 'backend' rather than 'work/backend'",
        details=f"Offending name: {name!r}" if name else None,
        original_error=original,
    )


def error_already_exists(path: str, message: str, original: Exception | None = None) -> ErrorInfo:
    """Create error info for a workspace that is already present."""
    return ErrorInfo(
        message=message,
        category=ErrorCategory.EXISTS,
        suggestion="Run 'workspace update <name> --add <path>' to add repositories to it",
        details=f"Path: {path}",
        original_error=original,
    )


def error_not_found(path: str, message: str, original: Exception | None = None) -> ErrorInfo:
    """Create error info for a missing workspace or link."""
    if "link" in message.lower():
        suggestion = "Run 'workspace list --detail' to see the links in each workspace"
    else:
        suggestion = "Run 'workspace list' to see available workspaces"

    return ErrorInfo(
        message=message,
        category=ErrorCategory.NOT_FOUND,
        suggestion=suggestion,
        details=f"Path: {path}",
        original_error=original,
    )


def error_not_a_symlink(path: str, message: str, original: Exception | None = None) -> ErrorInfo:
    """Create error info for removing an entry that is not a link."""
    return ErrorInfo(
        message=message,
        category=ErrorCategory.WRONG_KIND,
        suggestion="Only links are removed; delete regular files or directories by hand",
        details=f"Path: {path}",
        original_error=original,
    )


def error_filesystem(path: str | None, message: str, original: Exception | None = None) -> ErrorInfo:
    """Create error info for a failed filesystem call."""
    cause = original.__cause__ if original is not None else None

    suggestion = "Check the path and its permissions"
    if "resolve" in message.lower():
        suggestion = "Check that the path exists"
    elif isinstance(original, PermissionError) or isinstance(cause, PermissionError):
        suggestion = "Check file permissions or run with appropriate access"

    return ErrorInfo(
        message=message,
        category=ErrorCategory.FILE,
        suggestion=suggestion,
        details=f"Path: {path}" if path else None,
        original_error=original,
    )


def error_shell(shell: str, message: str, original: Exception | None = None) -> ErrorInfo:
    """Create error info for an activation shell that failed to start."""
    return ErrorInfo(
        message=f"Failed to start shell '{shell}': {message}",
        category=ErrorCategory.SHELL,
        suggestion="Set SHELL or run 'workspace config set shell.command <path>'",
        original_error=original,
    )


def error_internal(message: str, original: Exception | None = None) -> ErrorInfo:
    """Create error info for internal/unexpected errors."""
    return ErrorInfo(
        message=f"Internal error: {message}",
        category=ErrorCategory.INTERNAL,
        suggestion="This may be a bug. Re-run with --debug to see the stack trace",
        original_error=original,
    )


def handle_exception(
    console: Console,
    exception: Exception,
    context: str = "operation",
    exit_code: int = 1,
    exit_on_error: bool = True,
) -> ErrorInfo:
    """Handle an exception and display a formatted error.

    Args:
        console: Rich console for output
        exception: The exception to handle
        context: Description of what was being done
        exit_code: Exit code to use if exit_on_error is True
        exit_on_error: Whether to exit after displaying the error

    Returns:
        ErrorInfo for the error (useful if not exiting)
    """
    error = classify_exception(exception, context)
    format_error(error, console)

    if exit_on_error:
        sys.exit(exit_code)

    return error


def classify_exception(exception: Exception, context: str = "operation") -> ErrorInfo:
    """Classify an exception into an ErrorInfo.

    Args:
        exception: The exception to classify
        context: Description of what was being done

    Returns:
        ErrorInfo with appropriate categorization
    """
    if isinstance(exception, WorkspaceError):
        path = str(exception.path) if exception.path is not None else ""

        if isinstance(exception, InvalidNameError):
            return error_invalid_name(path, exception.message, exception)
        if isinstance(exception, AlreadyExistsError):
            return error_already_exists(path, exception.message, exception)
        if isinstance(exception, NotFoundError):
            return error_not_found(path, exception.message, exception)
        if isinstance(exception, NotASymlinkError):
            return error_not_a_symlink(path, exception.message, exception)
        if isinstance(exception, WorkspaceIOError):
            return error_filesystem(path or None, exception.message, exception)

    if isinstance(exception, FileNotFoundError):
        return error_filesystem(exception.filename, f"{context.capitalize()} failed: file not found", exception)

    if isinstance(exception, PermissionError):
        return ErrorInfo(
            message=f"Permission denied: {exception}",
            category=ErrorCategory.FILE,
            suggestion="Check file permissions or run with appropriate access",
            original_error=exception,
        )

    if isinstance(exception, OSError):
        return error_filesystem(exception.filename, f"{context.capitalize()} failed: {exception}", exception)

    return error_internal(f"{context}: {exception}", exception)
