"""wsm CLI - workspace manager.

Main entry point for the workspace command.
"""

from __future__ import annotations

import json
import logging
import os
import shlex
import subprocess
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import (
    WSMConfig,
    format_config_for_display,
    list_config_keys,
    load_config,
    resolve_root,
    resolve_shell,
    save_config,
)
from .tui import SelectorItem, run_selector
from .utils.errors import error_shell, format_error, handle_exception, is_debug_mode, set_debug_mode
from .workspace import NotFoundError, WorkspaceError, WorkspaceStore, validate_name

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


@dataclass(frozen=True)
class CLIContext:
    """Per-invocation settings shared by all commands."""

    config: WSMConfig
    store: WorkspaceStore
    shell: str


def configure_logging(level: str) -> None:
    """Send wsm log records to stderr through rich."""
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("wsm")
    package_logger.handlers = [handler]
    package_logger.setLevel(level.upper())


@contextmanager
def report_errors(context: str) -> Iterator[None]:
    """Print store failures with a suggestion and exit with status 1."""
    try:
        yield
    except WorkspaceError as e:
        handle_exception(err_console, e, context)


def require_name(name_pos: str | None, name: str | None) -> str:
    """Pick the positional name over --name; one of them is required."""
    workspace_name = name_pos or name
    if not workspace_name:
        raise click.UsageError("Workspace name is required (provide as argument or via --name/-n)")
    return workspace_name


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version and exit")
@click.option("--debug", "-d", is_flag=True, help="Enable debug mode with verbose error output")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace root directory (overrides WORKSPACE_ROOT and the config file)",
)
@click.pass_context
def main(ctx: click.Context, version: bool, debug: bool, root: Path | None) -> None:
    """Manage local development workspaces.

    A workspace is a directory of symlinks to repositories elsewhere on
    disk. Activate one to open a shell inside it.

    Use --debug for verbose error output with stack traces.
    """
    if debug:
        set_debug_mode(True)

    if version:
        console.print(f"wsm version {__version__}")
        ctx.exit()

    config = load_config()
    configure_logging("debug" if is_debug_mode() else config.ui.log_level)

    ctx.obj = CLIContext(
        config=config,
        store=WorkspaceStore(resolve_root(config, root)),
        shell=resolve_shell(config),
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# =============================================================================
# Workspace Commands
# =============================================================================


@main.command()
@click.argument("name_pos", metavar="[NAME]", required=False)
@click.option("--name", "-n", default=None, help="Workspace name (alternative to the argument)")
@click.option(
    "--repo",
    "-r",
    "repos",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Repository to link into the new workspace (repeatable)",
)
@click.option("--activate", "-a", is_flag=True, help="Enter the workspace right after creating it")
@click.pass_obj
def create(obj: CLIContext, name_pos: str | None, name: str | None, repos: tuple[Path, ...], activate: bool) -> None:
    """Create a new workspace.

    \b
    Examples:
        workspace create myproject
        workspace create myproject -r ~/src/api -r ~/src/web
        workspace create -n myproject --activate
    """
    workspace_name = require_name(name_pos, name)
    store = obj.store
    existed = os.path.lexists(store.workspace_directory(workspace_name))

    try:
        ws_dir = store.create_workspace(workspace_name, list(repos))
    except WorkspaceError as e:
        if not existed and store.workspace_exists(workspace_name):
            err_console.print(
                f"[yellow]Workspace '{escape(workspace_name)}' was created; "
                "links added before the failure were kept[/yellow]"
            )
        handle_exception(err_console, e, "create workspace")

    console.print(f"[green]✓ Created workspace '{escape(workspace_name)}'[/green]")
    console.print(f"[dim]  Path: {escape(str(ws_dir))}[/dim]", highlight=False)

    with report_errors("list links"):
        for link in store.list_links(workspace_name):
            console.print(f"  [cyan]{escape(link.name)}[/cyan] -> {escape(str(link.target))}", highlight=False)

    if activate:
        activate_workspace(obj, workspace_name)


@main.command("list")
@click.option("--detail", is_flag=True, help="Show symlink targets")
@click.pass_obj
def list_cmd(obj: CLIContext, detail: bool) -> None:
    """List all workspaces and their links.

    \b
    Examples:
        workspace list
        workspace list --detail
    """
    store = obj.store
    detail = detail or obj.config.ui.detail

    with report_errors("list workspaces"):
        workspaces = store.list_workspaces()

    if not workspaces:
        console.print("No workspaces found.")
        return

    for ws in workspaces:
        console.print(f"[bold green]{escape(ws)}[/bold green]")
        try:
            links = store.list_links(ws)
        except WorkspaceError as e:
            if detail:
                err_console.print(f"  [red]Error listing links:[/red] {escape(str(e))}")
            continue

        if detail:
            for link in links:
                console.print(f"  [cyan]{escape(link.name)}[/cyan] -> {escape(str(link.target))}", highlight=False)
        elif links:
            console.print("  " + escape("; ".join(link.name for link in links)), highlight=False)


@main.command()
@click.argument("name_pos", metavar="[NAME]", required=False)
@click.option("--name", "-n", default=None, help="Workspace name (alternative to the argument)")
@click.option(
    "--add",
    "add_paths",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Repository to link (repeatable)",
)
@click.option("--remove", "remove_names", multiple=True, help="Link name to remove (repeatable)")
@click.pass_obj
def update(
    obj: CLIContext,
    name_pos: str | None,
    name: str | None,
    add_paths: tuple[Path, ...],
    remove_names: tuple[str, ...],
) -> None:
    """Add or remove links in a workspace.

    Additions run before removals; the first failure stops the command.

    \b
    Examples:
        workspace update myproject --add ~/src/cli
        workspace update myproject --remove web
        workspace update -n myproject --add ../lib --remove old-lib
    """
    workspace_name = require_name(name_pos, name)
    store = obj.store

    if not add_paths and not remove_names:
        console.print("[yellow]Nothing to update[/yellow]")
        console.print("[dim]Use --add <path> or --remove <link>[/dim]")
        return

    for path in add_paths:
        with report_errors("add link"):
            created = store.add_link(workspace_name, path)
        if created:
            console.print(f"[green]✓ Linked {escape(str(path))}[/green]", highlight=False)
        else:
            console.print(f"[dim]Already linked, skipping: {escape(str(path))}[/dim]", highlight=False)

    for link_name in remove_names:
        with report_errors("remove link"):
            store.remove_link(workspace_name, link_name)
        console.print(f"[green]✓ Removed link: {escape(link_name)}[/green]")


@main.command()
@click.argument("name_pos", metavar="[NAME]", required=False)
@click.option("--name", "-n", default=None, help="Workspace name (alternative to the argument)")
@click.confirmation_option(prompt="Remove this workspace and all of its links?")
@click.pass_obj
def remove(obj: CLIContext, name_pos: str | None, name: str | None) -> None:
    """Remove a workspace.

    Deletes the workspace directory and its links. The linked
    repositories themselves are not touched.

    \b
    Examples:
        workspace remove myproject --yes
    """
    workspace_name = require_name(name_pos, name)

    with report_errors("remove workspace"):
        obj.store.remove_workspace(workspace_name)

    console.print(f"[green]✓ Removed workspace: {escape(workspace_name)}[/green]")


@main.command()
@click.argument("name", required=False)
@click.option("--detail", is_flag=True, help="Show symlink targets in the selector")
@click.pass_obj
def activate(obj: CLIContext, name: str | None, detail: bool) -> None:
    """Enter a workspace in a sub-shell.

    Without a name, pick one from an interactive list
    (↑/↓ to move, Enter to select, q/Esc to quit).

    \b
    Examples:
        workspace activate
        workspace activate myproject
        workspace activate --detail
    """
    if name:
        activate_workspace(obj, name)
        return

    store = obj.store
    with report_errors("list workspaces"):
        workspaces = store.list_workspaces()

    if not workspaces:
        console.print("No workspaces found.")
        return

    items = build_selector_items(store, workspaces, detail or obj.config.ui.detail)
    selected = run_selector(items)

    if selected is not None:
        activate_workspace(obj, selected)


@main.command()
@click.argument("name")
@click.pass_obj
def path(obj: CLIContext, name: str) -> None:
    """Print a workspace's directory.

    \b
    Examples:
        cd "$(workspace path myproject)"
    """
    with report_errors("locate workspace"):
        validate_name(name)
        if not obj.store.workspace_exists(name):
            raise NotFoundError(f"Workspace '{name}' does not exist", obj.store.workspace_directory(name))

    click.echo(str(obj.store.workspace_directory(name)))


def build_selector_items(store: WorkspaceStore, workspaces: list[str], detail: bool) -> list[SelectorItem]:
    """Display text for each workspace: its name followed by its links.

    Workspaces whose links cannot be listed are shown by name only.
    """
    items = []
    for ws in workspaces:
        try:
            links = store.list_links(ws)
        except WorkspaceError:
            items.append(SelectorItem(ws, ws))
            continue

        if not links:
            display = ws
        elif detail:
            display = f"{ws} ({', '.join(f'{link.name} -> {link.target}' for link in links)})"
        else:
            display = f"{ws} ({'; '.join(link.name for link in links)})"
        items.append(SelectorItem(display, ws))

    return items


def activate_workspace(obj: CLIContext, name: str) -> None:
    """Run a shell inside the workspace directory until it exits."""
    store = obj.store

    with report_errors("activate workspace"):
        validate_name(name)
        ws_path = store.workspace_directory(name)
        if not ws_path.is_dir():
            raise NotFoundError(f"Workspace path does not exist: {ws_path}", ws_path)

    console.print(f"Activating workspace: [green]{escape(name)}[/green]")
    console.print(f"Entering sub-shell at {escape(str(ws_path))}", highlight=False)

    env = {**os.environ, "WSM_WORKSPACE": name}
    try:
        argv = shlex.split(obj.shell)
        if not argv:
            raise ValueError("shell command is empty")
        result = subprocess.run(argv, cwd=ws_path, env=env, check=False)
    except (OSError, ValueError) as e:
        format_error(error_shell(obj.shell, str(e), e), err_console)
        sys.exit(1)

    if result.returncode != 0:
        err_console.print("[yellow]Shell exited with non-zero status[/yellow]")

    console.print(f"Deactivated workspace: [yellow]{escape(name)}[/yellow]")


# =============================================================================
# Config Commands
# =============================================================================


@main.group()
def config() -> None:
    """View and manage wsm configuration.

    wsm reads an optional file at ~/.wsm/config.toml (or $WSM_CONFIG).

    Configuration priority:
    1. --root option
    2. Environment variables (WORKSPACE_ROOT, SHELL)
    3. Config file
    4. Defaults
    """
    pass


@config.command("show")
@click.option("--json", "-j", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def config_show(obj: CLIContext, as_json: bool) -> None:
    """Show current configuration.

    \b
    Examples:
        workspace config show
        workspace config show --json
    """
    if as_json:
        data = obj.config.to_dict()
        data["resolved"] = {"root": str(obj.store.root), "shell": obj.shell}
        click.echo(json.dumps(data, indent=2))
        return

    console.print(format_config_for_display(obj.config, obj.store.root), markup=False, highlight=False)


@config.command("get")
@click.argument("key")
@click.pass_obj
def config_get(obj: CLIContext, key: str) -> None:
    """Get a specific configuration value.

    \b
    Examples:
        workspace config get core.root
    """
    if key not in list_config_keys():
        console.print(f"[yellow]Key not found: {escape(key)}[/yellow]")
        console.print("[dim]Use 'workspace config keys' to list available keys[/dim]")
        return

    console.print(f"{key} = {obj.config.get(key)}", markup=False, highlight=False)


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def config_set(obj: CLIContext, key: str, value: str) -> None:
    """Set a configuration value and save it.

    \b
    Examples:
        workspace config set core.root ~/work/spaces
        workspace config set shell.command /bin/zsh
        workspace config set ui.detail true
    """
    parsed_value: str | bool
    if value.lower() in ("true", "yes"):
        parsed_value = True
    elif value.lower() in ("false", "no"):
        parsed_value = False
    else:
        parsed_value = value

    if not obj.config.set(key, parsed_value):
        console.print(f"[red]Invalid key or value: {escape(key)} = {escape(value)}[/red]")
        console.print("[dim]Use 'workspace config keys' to list available keys[/dim]")
        sys.exit(1)

    if not save_config(obj.config):
        console.print("[red]Failed to save configuration[/red]")
        sys.exit(1)

    console.print(f"[green]✓ Set {escape(key)} = {escape(str(parsed_value))}[/green]")


@config.command("keys")
def config_keys() -> None:
    """List all available configuration keys."""
    for key in list_config_keys():
        console.print(key)


if __name__ == "__main__":
    main()
