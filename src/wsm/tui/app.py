"""Full-screen workspace selector."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static
from rich.text import Text

from .state import SelectionState, SelectorItem

# Seconds between redraws while waiting for input
REDRAW_INTERVAL = 0.1

HIGHLIGHT_SYMBOL = ">> "
HIGHLIGHT_STYLE = "bold bright_green"


def help_text() -> Text:
    """Key help shown under the list."""
    text = Text()
    text.append("Use ")
    text.append("↑/↓", style="bold")
    text.append(" to move, ")
    text.append("Enter", style="bold")
    text.append(" to select, ")
    text.append("q/Esc", style="bold")
    text.append(" to quit")
    return text


class SelectorApp(App[str | None]):
    """Modal list of workspaces. Exits with the picked identifier or None."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #workspace-list {
        height: 1fr;
        border: round white;
        padding: 0 1;
    }

    #help-line {
        height: 3;
        border: round white;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("up", "cursor_up", "Up", show=False, priority=True),
        Binding("down", "cursor_down", "Down", show=False, priority=True),
        Binding("enter", "confirm", "Select", show=False, priority=True),
        Binding("q", "cancel", "Quit", show=False, priority=True),
        Binding("escape", "cancel", "Quit", show=False, priority=True),
        Binding("ctrl+c", "cancel", "Quit", show=False, priority=True),
    ]

    def __init__(self, items: list[SelectorItem] | list[tuple[str, str]]):
        super().__init__()
        self.selection = SelectionState(list(items))

    def compose(self) -> ComposeResult:
        yield Static(id="workspace-list")
        yield Static(help_text(), id="help-line")

    def on_mount(self) -> None:
        self.query_one("#workspace-list", Static).border_title = "Select Workspace"
        self._redraw()
        self.set_interval(REDRAW_INTERVAL, self._redraw)

    def render_items(self) -> Text:
        """Render every item, marking the highlighted one."""
        text = Text()
        for i, item in enumerate(self.selection.items):
            if i:
                text.append("\n")
            if i == self.selection.index:
                text.append(HIGHLIGHT_SYMBOL + item.display, style=HIGHLIGHT_STYLE)
            else:
                text.append(" " * len(HIGHLIGHT_SYMBOL) + item.display, style="white")
        return text

    def _redraw(self) -> None:
        self.query_one("#workspace-list", Static).update(self.render_items())

    def action_cursor_up(self) -> None:
        self.selection.move_up()
        self._redraw()

    def action_cursor_down(self) -> None:
        self.selection.move_down()
        self._redraw()

    def action_confirm(self) -> None:
        self.exit(self.selection.selected.identifier)

    def action_cancel(self) -> None:
        self.exit(None)


def run_selector(items: list[SelectorItem] | list[tuple[str, str]]) -> str | None:
    """Let the user pick one item; returns its identifier or None if cancelled.

    The terminal is switched to the alternate screen and raw input for the
    duration of the app and restored on every exit path. An empty list returns
    None without touching the terminal.
    """
    if not items:
        return None

    app = SelectorApp(items)
    return app.run()
