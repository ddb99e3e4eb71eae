"""Selection state for the workspace selector."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple


class SelectorItem(NamedTuple):
    """One selectable row: the text shown and the identifier returned."""
    display: str
    identifier: str


@dataclass
class SelectionState:
    """Highlighted row of a non-empty item list, with wrap-around movement."""
    items: list[SelectorItem] = field(default_factory=list)
    index: int = 0

    def __post_init__(self) -> None:
        self.items = [SelectorItem(*item) for item in self.items]
        if not self.items:
            raise ValueError("SelectionState needs at least one item")

    def move_down(self) -> None:
        self.index = 0 if self.index >= len(self.items) - 1 else self.index + 1

    def move_up(self) -> None:
        self.index = len(self.items) - 1 if self.index == 0 else self.index - 1

    @property
    def selected(self) -> SelectorItem:
        return self.items[self.index]
