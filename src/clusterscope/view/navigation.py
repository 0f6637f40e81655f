"""
Cursor movement for lists, tables and tabs.

Every ordered collection in the dashboard keeps a ListCursor. Movement
wraps cyclically: forward from the last element goes to 0, backward from 0
(or from no selection) goes to the last element. An empty collection never
changes the cursor.
"""

from dataclasses import dataclass
from enum import Enum


class Navigate(Enum):
    """Direction of a navigation command."""

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


@dataclass
class ListCursor:
    """
    Selected position within a collection of known length.

    Attributes:
        selected: Index of the selected element, or None for no selection
        horizontal: If True the cursor moves with LEFT/RIGHT (tabs),
            otherwise with UP/DOWN (lists and tables)
    """

    selected: int | None = None
    horizontal: bool = False

    def apply(self, navigate: Navigate, length: int) -> bool:
        """
        Move the cursor one step.

        Directions on the other axis are ignored. A selection that is out of
        range for the current length (the collection shrank) counts as no
        selection.

        Args:
            navigate: Direction to move
            length: Current number of elements

        Returns:
            True if the selected index changed
        """
        if length <= 0:
            return False

        backward, forward = (
            (Navigate.LEFT, Navigate.RIGHT)
            if self.horizontal
            else (Navigate.UP, Navigate.DOWN)
        )
        current = self.get(length)

        if navigate == backward:
            target = length - 1 if current is None or current == 0 else current - 1
        elif navigate == forward:
            target = 0 if current is None else (current + 1) % length
        else:
            return False

        changed = target != self.selected
        self.selected = target
        return changed

    def get(self, length: int) -> int | None:
        """Selected index if it is valid for a collection of this length."""
        if self.selected is None or not 0 <= self.selected < length:
            return None
        return self.selected

    def reset(self, selected: int | None = None) -> None:
        self.selected = selected
