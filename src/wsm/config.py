"""Configuration for wsm.

Settings are stored at ~/.wsm/config.toml and organized into sections.

Configuration loading priority:
1. Command-line options (``--root``)
2. Environment variables
3. Config file (~/.wsm/config.toml)
4. Defaults (lowest)

Sections:
    [core]   - Workspace root directory
    [shell]  - Shell spawned on activation
    [ui]     - Selector and logging settings

Example:
    from wsm.config import load_config, resolve_root

    config = load_config()
    root = resolve_root(config)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".wsm"
DEFAULT_CONFIG_FILE = "config.toml"

# Workspaces live in ~/.workspaces unless overridden
DEFAULT_ROOT_DIRNAME = ".workspaces"
ROOT_ENV_VAR = "WORKSPACE_ROOT"
CONFIG_ENV_VAR = "WSM_CONFIG"
DEFAULT_SHELL = "/bin/sh"

LOG_LEVELS = ("debug", "info", "warning", "error")


# =============================================================================
# Configuration Sections
# =============================================================================


@dataclass
class CoreConfig:
    """Core settings.

    Attributes:
        root: Workspace root directory. Empty means ~/.workspaces.
    """

    root: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CoreConfig:
        """Create from dictionary."""
        return cls(root=str(data.get("root", "")))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"root": self.root}


@dataclass
class ShellConfig:
    """Activation shell settings.

    Attributes:
        command: Shell to spawn. Empty means $SHELL, then /bin/sh.
    """

    command: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ShellConfig:
        """Create from dictionary."""
        return cls(command=str(data.get("command", "")))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"command": self.command}


@dataclass
class UIConfig:
    """Selector and logging settings.

    Attributes:
        detail: Show link targets in listings and the selector by default.
        log_level: Logging level (debug, info, warning, error).
    """

    detail: bool = False
    log_level: str = "warning"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UIConfig:
        """Create from dictionary."""
        log_level = str(data.get("log_level", "warning")).lower()
        if log_level not in LOG_LEVELS:
            logger.warning(f"Unknown log level '{log_level}', using 'warning'")
            log_level = "warning"
        return cls(
            detail=bool(data.get("detail", False)),
            log_level=log_level,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "detail": self.detail,
            "log_level": self.log_level,
        }


# =============================================================================
# Main Configuration Class
# =============================================================================


@dataclass
class WSMConfig:
    """Main configuration container."""

    core: CoreConfig = field(default_factory=CoreConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    # Metadata
    config_version: str = "1.0"
    config_path: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WSMConfig:
        """Create configuration from dictionary."""
        return cls(
            core=CoreConfig.from_dict(data.get("core", {})),
            shell=ShellConfig.from_dict(data.get("shell", {})),
            ui=UIConfig.from_dict(data.get("ui", {})),
            config_version=data.get("config", {}).get("version", "1.0"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "config": {
                "version": self.config_version,
            },
            "core": self.core.to_dict(),
            "shell": self.shell.to_dict(),
            "ui": self.ui.to_dict(),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key path.

        Example:
            config.get('core.root')
            config.get('ui.detail', False)
        """
        parts = key.split(".")
        obj: Any = self

        for part in parts:
            if hasattr(obj, part) and not part.startswith("_"):
                obj = getattr(obj, part)
            else:
                return default

        return obj

    def set(self, key: str, value: Any) -> bool:
        """Set a configuration value by dotted key path.

        Returns:
            True if set successfully, False for unknown keys or bad values.
        """
        if key not in list_config_keys():
            return False

        section_name, field_name = key.split(".", 1)
        section = getattr(self, section_name)

        if key == "ui.log_level":
            value = str(value).lower()
            if value not in LOG_LEVELS:
                return False

        if isinstance(getattr(section, field_name), bool) and not isinstance(value, bool):
            return False

        if isinstance(getattr(section, field_name), str):
            value = str(value)

        setattr(section, field_name, value)
        return True


# =============================================================================
# Configuration Loading/Saving
# =============================================================================


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    if custom_path := os.environ.get(CONFIG_ENV_VAR):
        return Path(custom_path).expanduser()

    return DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE


def load_config(config_path: Path | None = None) -> WSMConfig:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. Uses default if not specified.

    Returns:
        WSMConfig with settings from the file, or defaults if it is missing
        or unreadable.
    """
    path = config_path or get_config_path()

    config = WSMConfig()
    config.config_path = path

    if not path.exists():
        logger.debug(f"Config not found at {path}, using defaults")
        return config

    try:
        try:
            import tomllib
        except ImportError:
            import tomli as tomllib  # type: ignore

        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = WSMConfig.from_dict(data)
        config.config_path = path

    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config from {path}: {e}")
        config = WSMConfig()
        config.config_path = path

    return config


def save_config(config: WSMConfig, config_path: Path | None = None) -> bool:
    """Save configuration to TOML file.

    Returns:
        True if saved successfully, False otherwise.
    """
    import tomli_w

    path = config_path or config.config_path or get_config_path()

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            tomli_w.dump(config.to_dict(), f)
    except OSError as e:
        logger.error(f"Failed to save config: {e}")
        return False

    config.config_path = path
    logger.info(f"Saved config to {path}")
    return True


# =============================================================================
# Resolution
# =============================================================================


def resolve_root(config: WSMConfig | None = None, override: str | Path | None = None) -> Path:
    """Resolve the workspace root directory.

    Does not touch the filesystem; the root is only created when the first
    workspace is.

    Args:
        config: Loaded configuration, consulted after the environment.
        override: Explicit root, e.g. from ``--root``. Wins over everything.

    Returns:
        Absolute root path.
    """
    if override:
        root = Path(override)
    elif env_root := os.environ.get(ROOT_ENV_VAR):
        root = Path(env_root)
    elif config is not None and config.core.root:
        root = Path(config.core.root)
    else:
        root = Path.home() / DEFAULT_ROOT_DIRNAME

    return Path(os.path.abspath(root.expanduser()))


def resolve_shell(config: WSMConfig | None = None) -> str:
    """Shell to spawn on activation: config, then $SHELL, then /bin/sh.

    Blank values are treated as unset.
    """
    if config is not None and config.shell.command.strip():
        return config.shell.command
    return os.environ.get("SHELL", "").strip() or DEFAULT_SHELL


# =============================================================================
# CLI Helpers
# =============================================================================


def format_config_for_display(config: WSMConfig, root: Path | None = None) -> str:
    """Format configuration for CLI display.

    Args:
        config: Configuration to format.
        root: Resolved root to show alongside the configured one.
    """
    lines = []
    lines.append("wsm Configuration")
    lines.append("=" * 50)
    lines.append("")

    if config.config_path:
        exists = "" if config.config_path.exists() else " (not created yet)"
        lines.append(f"Config file: {config.config_path}{exists}")
        lines.append("")

    lines.append("[core]")
    lines.append(f"  root = {config.core.root or '(default)'}")
    if root is not None:
        lines.append(f"  resolved root = {root}")
    lines.append("")

    lines.append("[shell]")
    lines.append(f"  command = {config.shell.command or '(from $SHELL)'}")
    lines.append("")

    lines.append("[ui]")
    lines.append(f"  detail = {config.ui.detail}")
    lines.append(f"  log_level = {config.ui.log_level}")

    return "\n".join(lines)


def list_config_keys() -> list[str]:
    """List all available configuration keys as dotted paths."""
    return [
        "core.root",
        "shell.command",
        "ui.detail",
        "ui.log_level",
    ]
