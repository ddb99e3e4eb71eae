"""wsm - manage local development workspaces.

A workspace is a named directory of symlinks to repositories that live
elsewhere on disk.
"""

__version__ = "0.1.0"
