"""wsm TUI module."""

from .app import SelectorApp, run_selector
from .state import SelectionState, SelectorItem

__all__ = ["SelectorApp", "SelectionState", "SelectorItem", "run_selector"]
