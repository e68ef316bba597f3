"""
Board model: the nine cells plus the order they were filled in.
"""
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from app.core.exceptions import CellOccupied, RoundOver
from app.core.game_config import CELL_COUNT, Mark, is_valid_index
from app.services.outcome import is_terminal


def empty_indices(grid: Sequence[Mark]) -> Iterator[int]:
    """Yield the empty cells of a grid in ascending order."""
    return (i for i, cell in enumerate(grid) if cell == Mark.EMPTY)


def _check_index(index: int) -> None:
    if not is_valid_index(index):
        raise ValueError(f"Cell index {index} is outside 0-{CELL_COUNT - 1}")


class Board:
    """
    A 3x3 grid indexed 0-8 in row-major order, with its move history.

    Invariant: ``len(history)`` equals the number of filled cells and each
    history entry is a distinct filled cell.
    """

    def __init__(self, cells: Optional[Iterable[Mark]] = None,
                 history: Optional[Iterable[int]] = None):
        self.cells: List[Mark] = (
            [Mark(c) for c in cells] if cells is not None else [Mark.EMPTY] * CELL_COUNT
        )
        self.history: List[int] = list(history) if history is not None else []
        if len(self.cells) != CELL_COUNT:
            raise ValueError(f"A board has {CELL_COUNT} cells, got {len(self.cells)}")
        for index in self.history:
            _check_index(index)
        filled = {i for i, cell in enumerate(self.cells) if cell != Mark.EMPTY}
        if len(self.history) != len(filled) or set(self.history) != filled:
            raise ValueError(
                f"History {self.history} does not match the filled cells {sorted(filled)}"
            )

    def is_empty(self, index: int) -> bool:
        _check_index(index)
        return self.cells[index] == Mark.EMPTY

    def place(self, index: int, mark: Mark) -> None:
        """Put mark on an empty cell and record it in the history."""
        _check_index(index)
        if is_terminal(self.cells):
            raise RoundOver("The round has already ended")
        if self.cells[index] != Mark.EMPTY:
            raise CellOccupied(f"Cell {index} is already occupied by {self.cells[index].value}")
        self.cells[index] = mark
        self.history.append(index)

    def remove(self, index: int) -> None:
        """Take back the most recent move. Only valid for the last history entry."""
        _check_index(index)
        if not self.history or self.history[-1] != index:
            raise ValueError(f"Cell {index} is not the last move played")
        self.history.pop()
        self.cells[index] = Mark.EMPTY

    def empty_indices(self) -> Iterator[int]:
        return empty_indices(self.cells)

    def snapshot(self) -> Tuple[Mark, ...]:
        """Immutable copy of the grid."""
        return tuple(self.cells)

    def clear(self) -> None:
        self.cells = [Mark.EMPTY] * CELL_COUNT
        self.history = []
