"""
Battle grid model.

Fixed dimensions plus the set of cells that cannot be entered. The grid
knows nothing about who occupies a cell; the battle state keeps it in sync
with actor positions and terrain.
"""

from typing import Iterable, Set, Tuple

from engine.battle.types import Position
from engine.error_handler import GridError


class BattleGrid:
    """Dimensions and blocked cells of one encounter."""

    def __init__(self, width: int, height: int):
        self._dimensions = (width, height)
        self._blocked: Set[Position] = set()

    @property
    def dimensions(self) -> Tuple[int, int]:
        return self._dimensions

    @property
    def width(self) -> int:
        return self._dimensions[0]

    @property
    def height(self) -> int:
        return self._dimensions[1]

    @property
    def blocked(self) -> frozenset:
        return frozenset(self._blocked)

    def in_bounds(self, pos: Tuple[int, int]) -> bool:
        return 0 <= pos[0] < self.width and 0 <= pos[1] < self.height

    def is_blocked(self, pos: Tuple[int, int]) -> bool:
        return Position(*pos) in self._blocked

    def is_free(self, pos: Tuple[int, int]) -> bool:
        """In bounds and not blocked."""
        return self.in_bounds(pos) and not self.is_blocked(pos)

    def block(self, pos: Tuple[int, int]) -> None:
        """
        Mark a cell as blocked.

        Raises:
            GridError: if the cell is already blocked
        """
        pos = Position(*pos)
        if pos in self._blocked:
            raise GridError(f"Cell {pos} is already blocked")
        self._blocked.add(pos)

    def unblock(self, pos: Tuple[int, int]) -> None:
        """
        Clear a blocked cell.

        Raises:
            GridError: if the cell was not blocked
        """
        pos = Position(*pos)
        if pos not in self._blocked:
            raise GridError(f"Cell {pos} is not blocked")
        self._blocked.remove(pos)

    def move(self, old: Tuple[int, int], new: Tuple[int, int]) -> None:
        """Move a blocker (typically an actor) from one cell to another."""
        self.unblock(old)
        self.block(new)

    def rebuild(self, positions: Iterable[Tuple[int, int]]) -> None:
        """Replace the blocked set wholesale, e.g. at encounter setup."""
        self._blocked.clear()
        for pos in positions:
            self.block(pos)
