"""wsm utility modules."""

from .errors import (
    ErrorCategory,
    ErrorInfo,
    classify_exception,
    error_already_exists,
    error_filesystem,
    error_internal,
    error_invalid_name,
    error_not_a_symlink,
    error_not_found,
    error_shell,
    format_error,
    handle_exception,
    is_debug_mode,
    set_debug_mode,
)

__all__ = [
    # Error handling
    "ErrorCategory",
    "ErrorInfo",
    "format_error",
    "handle_exception",
    "classify_exception",
    "error_invalid_name",
    "error_already_exists",
    "error_not_found",
    "error_not_a_symlink",
    "error_filesystem",
    "error_shell",
    "error_internal",
    "set_debug_mode",
    "is_debug_mode",
]
