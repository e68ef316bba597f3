"""
Win and draw detection for a 3x3 grid.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from app.core.game_config import Mark, WIN_PATTERNS


@dataclass(frozen=True)
class Outcome:
    """Result of evaluating a grid."""
    winner: Optional[Mark] = None
    pattern: Optional[Tuple[int, int, int]] = None


def evaluate(grid: Sequence[Mark]) -> Outcome:
    """
    Scan the win patterns in table order and report the first complete line.

    A legal game can only ever have one winner, so the scan order only
    decides which of several lines of the same mark gets highlighted.
    """
    for pattern in WIN_PATTERNS:
        a, b, c = pattern
        if grid[a] != Mark.EMPTY and grid[a] == grid[b] == grid[c]:
            return Outcome(winner=Mark(grid[a]), pattern=pattern)
    return Outcome()


def is_full(grid: Sequence[Mark]) -> bool:
    return all(cell != Mark.EMPTY for cell in grid)


def is_draw(grid: Sequence[Mark]) -> bool:
    """A draw is a full grid with no winner."""
    return is_full(grid) and evaluate(grid).winner is None


def is_terminal(grid: Sequence[Mark]) -> bool:
    return evaluate(grid).winner is not None or is_full(grid)


def completes_line(grid: Sequence[Mark], index: int, mark: Mark) -> bool:
    """Check if placing mark on the empty cell at index makes three in a row."""
    for pattern in WIN_PATTERNS:
        if index not in pattern:
            continue
        if all(grid[i] == mark for i in pattern if i != index):
            return True
    return False
