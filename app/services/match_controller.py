"""
Match scoring for best-of-N play.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from app.core.game_config import (
    DEFAULT_BEST_OF, DEFAULT_DIFFICULTY, DEFAULT_MODE,
    DEFAULT_PLAYER_O_NAME, DEFAULT_PLAYER_X_NAME,
    Difficulty, Mark, Mode, get_match_target_wins, is_valid_best_of
)

logger = logging.getLogger(__name__)


@dataclass
class GameConfiguration:
    """Settings that shape a match. Read by the move engine and the opponent."""
    mode: Mode = DEFAULT_MODE
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    best_of: int = DEFAULT_BEST_OF
    player_x_name: str = DEFAULT_PLAYER_X_NAME
    player_o_name: str = DEFAULT_PLAYER_O_NAME


@dataclass
class MatchState:
    round_wins_x: int = 0
    round_wins_o: int = 0
    draws: int = 0
    # Running scoreboard shown next to the match tally
    score_x: int = 0
    score_o: int = 0
    score_draws: int = 0
    round_starter: Mark = Mark.X


class MatchController:
    """
    Tracks round results against the target win count of the current match.

    Draws are counted but never decide a match; a match only ends when one
    side reaches ``match_target_wins``.
    """

    def __init__(self, config: Optional[GameConfiguration] = None,
                 state: Optional[MatchState] = None):
        self.config = config or GameConfiguration()
        self.state = state or MatchState()
        if not is_valid_best_of(self.config.best_of):
            raise ValueError(f"best_of must be 1, 3 or 5, got {self.config.best_of}")

    @property
    def match_target_wins(self) -> int:
        return get_match_target_wins(self.config.best_of)

    def record_round_result(self, winner: Optional[Mark]) -> None:
        """Add a finished round to the tally. ``None`` means a draw."""
        if winner == Mark.X:
            self.state.round_wins_x += 1
            self.state.score_x += 1
        elif winner == Mark.O:
            self.state.round_wins_o += 1
            self.state.score_o += 1
        elif winner is None:
            self.state.draws += 1
            self.state.score_draws += 1
        else:
            raise ValueError(f"Unknown round winner {winner!r}")

        logger.info(
            f"Round recorded: winner={winner.value if winner else 'draw'} "
            f"(X {self.state.round_wins_x} - O {self.state.round_wins_o}, "
            f"draws {self.state.draws}, target {self.match_target_wins})"
        )
        if self.is_match_over():
            logger.info(f"Match won by {self.match_winner().value}")

    def is_match_over(self) -> bool:
        target = self.match_target_wins
        return self.state.round_wins_x >= target or self.state.round_wins_o >= target

    def match_winner(self) -> Optional[Mark]:
        target = self.match_target_wins
        if self.state.round_wins_x >= target:
            return Mark.X
        if self.state.round_wins_o >= target:
            return Mark.O
        return None

    def start_new_match(self) -> None:
        """Zero the tally and hand the first move back to X."""
        self.state.round_wins_x = 0
        self.state.round_wins_o = 0
        self.state.draws = 0
        self.state.score_x = 0
        self.state.score_o = 0
        self.state.score_draws = 0
        self.state.round_starter = Mark.X
        logger.info(
            f"New match: best of {self.config.best_of}, "
            f"{self.config.mode.value}, {self.config.difficulty.value}"
        )

    def set_best_of(self, best_of: int) -> None:
        if not is_valid_best_of(best_of):
            raise ValueError(f"best_of must be 1, 3 or 5, got {best_of}")
        self.config.best_of = best_of
