"""
Configuration constants for the TicTacToe game engine.
"""
from enum import Enum
from typing import Tuple


class Mark(str, Enum):
    EMPTY = ""
    X = "X"
    O = "O"

    def other(self) -> "Mark":
        """Get the opposing mark."""
        if self == Mark.X:
            return Mark.O
        if self == Mark.O:
            return Mark.X
        raise ValueError("EMPTY has no opposing mark")


class Mode(str, Enum):
    PVP = "pvp"
    CPU = "cpu"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Board geometry
BOARD_SIZE = 3
CELL_COUNT = BOARD_SIZE * BOARD_SIZE
CENTER = 4
CORNERS: Tuple[int, ...] = (0, 2, 6, 8)

# Rows, columns, diagonals. Scan order decides which pattern is highlighted.
WIN_PATTERNS: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

# Match rules
BEST_OF_CHOICES: Tuple[int, ...] = (1, 3, 5)
DEFAULT_BEST_OF = 3
DEFAULT_MODE = Mode.PVP
DEFAULT_DIFFICULTY = Difficulty.MEDIUM

# In CPU mode the human plays X and the computer plays O
HUMAN_MARK = Mark.X
COMPUTER_MARK = Mark.O

# Player names
DEFAULT_PLAYER_X_NAME = "Player X"
DEFAULT_PLAYER_O_NAME = "Player O"
COMPUTER_NAME = "Computer"

# Minimax scores
WIN_SCORE = 10
LOSS_SCORE = -10
DRAW_SCORE = 0


def get_match_target_wins(best_of: int) -> int:
    """Round wins needed to take a best-of-N match (ceil(N / 2))."""
    return (best_of + 1) // 2


def is_valid_index(index: int) -> bool:
    """Check if a cell index is on the board."""
    return 0 <= index < CELL_COUNT


def is_valid_best_of(best_of: int) -> bool:
    return best_of in BEST_OF_CHOICES
