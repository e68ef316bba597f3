"""
Computer opponents, one per difficulty.
"""
import logging
import random
from functools import lru_cache
from typing import Dict, Optional, Sequence, Tuple, Type

from app.core.game_config import (
    CENTER, CORNERS, DRAW_SCORE, LOSS_SCORE, WIN_SCORE, Difficulty, Mark
)
from app.services.board import empty_indices
from app.services.outcome import completes_line, evaluate, is_full

logger = logging.getLogger(__name__)


class OpponentStrategy:
    """
    Picks a cell for the computer.

    ``choose_move`` is only called while the round is in progress and it is
    the computer's turn, so there is always at least one empty cell.
    """

    difficulty: Difficulty

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def choose_move(self, grid: Sequence[Mark], computer_mark: Mark, human_mark: Mark) -> int:
        raise NotImplementedError

    def _empty_cells(self, grid: Sequence[Mark]) -> list:
        empties = list(empty_indices(grid))
        if not empties:
            raise ValueError("No empty cell left to play")
        return empties


class RandomStrategy(OpponentStrategy):
    """Easy: any empty cell."""

    difficulty = Difficulty.EASY

    def choose_move(self, grid, computer_mark, human_mark):
        return self.rng.choice(self._empty_cells(grid))


class HeuristicStrategy(OpponentStrategy):
    """
    Medium: win if possible, otherwise block, otherwise take the center,
    then a corner, then anything.
    """

    difficulty = Difficulty.MEDIUM

    def choose_move(self, grid, computer_mark, human_mark):
        empties = self._empty_cells(grid)

        for index in empties:
            if completes_line(grid, index, computer_mark):
                return index

        for index in empties:
            if completes_line(grid, index, human_mark):
                return index

        if grid[CENTER] == Mark.EMPTY:
            return CENTER

        corners = [i for i in CORNERS if grid[i] == Mark.EMPTY]
        if corners:
            return self.rng.choice(corners)

        return self.rng.choice(empties)


@lru_cache(maxsize=None)
def _minimax(grid: Tuple[Mark, ...], to_move: Mark, computer_mark: Mark) -> int:
    """
    Score a position for the computer with perfect play from both sides.

    Only terminal positions are scored, so every win is worth the same no
    matter how many moves it takes.
    """
    winner = evaluate(grid).winner
    if winner is not None:
        return WIN_SCORE if winner == computer_mark else LOSS_SCORE
    if is_full(grid):
        return DRAW_SCORE

    scores = [
        _minimax(grid[:i] + (to_move,) + grid[i + 1:], to_move.other(), computer_mark)
        for i in empty_indices(grid)
    ]
    return max(scores) if to_move == computer_mark else min(scores)


class MinimaxStrategy(OpponentStrategy):
    """Hard: exhaustive minimax. Never loses."""

    difficulty = Difficulty.HARD

    def choose_move(self, grid, computer_mark, human_mark):
        snapshot = tuple(Mark(c) for c in grid)
        best_index = None
        best_score = float("-inf")

        # Strict comparison keeps the lowest index among equal scores
        for index in self._empty_cells(snapshot):
            child = snapshot[:index] + (computer_mark,) + snapshot[index + 1:]
            score = _minimax(child, human_mark, computer_mark)
            if score > best_score:
                best_score = score
                best_index = index

        logger.debug(f"Minimax picked {best_index} (score {best_score})")
        return best_index


STRATEGIES: Dict[Difficulty, Type[OpponentStrategy]] = {
    Difficulty.EASY: RandomStrategy,
    Difficulty.MEDIUM: HeuristicStrategy,
    Difficulty.HARD: MinimaxStrategy,
}


def get_strategy(difficulty: Difficulty, rng: Optional[random.Random] = None) -> OpponentStrategy:
    return STRATEGIES[Difficulty(difficulty)](rng)
