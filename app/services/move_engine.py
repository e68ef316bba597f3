"""
Round state machine: applies and takes back moves, detects the end of a round.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from app.core.exceptions import CellOccupied, NotYourTurn, RoundOver
from app.core.game_config import Mark, Mode, is_valid_index
from app.services.board import Board
from app.services.match_controller import GameConfiguration
from app.services.outcome import evaluate, is_full

logger = logging.getLogger(__name__)


class RoundStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    ROUND_OVER = "round_over"


@dataclass
class RoundTransitionResult:
    """What the presentation layer needs to render after a transition."""
    status: RoundStatus
    current_player: Mark
    board: List[Mark] = field(default_factory=list)
    history: List[int] = field(default_factory=list)
    winner: Optional[Mark] = None
    pattern: Optional[Tuple[int, int, int]] = None
    is_draw: bool = False
    last_move: Optional[int] = None


class MoveEngine:
    """
    Drives a single round from an empty grid to a win or a draw.

    The player to move is never stored: it is derived from the number of
    moves played and who started the round, so undo cannot desynchronise it.
    """

    def __init__(self, config: Optional[GameConfiguration] = None, starter: Mark = Mark.X):
        self.config = config or GameConfiguration()
        self.board = Board()
        self.starter = starter
        self.status = RoundStatus.IN_PROGRESS
        self.winner: Optional[Mark] = None
        self.pattern: Optional[Tuple[int, int, int]] = None
        self.is_draw = False
        # Bumped on every reset so stale scheduled work can tell rounds apart
        self.round_number = 1

    @property
    def current_player(self) -> Mark:
        if len(self.board.history) % 2 == 0:
            return self.starter
        return self.starter.other()

    @property
    def is_round_over(self) -> bool:
        return self.status == RoundStatus.ROUND_OVER

    def apply_move(self, index: int, player: Optional[Mark] = None) -> RoundTransitionResult:
        """
        Place the current player's mark on a cell.

        Raises:
            ValueError: index outside 0-8.
            RoundOver, NotYourTurn, CellOccupied: the move is rejected and
                nothing changes.
        """
        if not is_valid_index(index):
            raise ValueError(f"Cell index {index} is outside 0-8")
        if self.is_round_over:
            raise RoundOver("The round is over; start a new round to keep playing")

        mover = self.current_player
        if player is not None and player != mover:
            raise NotYourTurn(f"It's not {player.value}'s turn")
        if not self.board.is_empty(index):
            raise CellOccupied(f"Cell {index} is already occupied")

        self.board.place(index, mover)

        outcome = evaluate(self.board.cells)
        if outcome.winner is not None:
            self.status = RoundStatus.ROUND_OVER
            self.winner = outcome.winner
            self.pattern = outcome.pattern
            logger.info(f"{outcome.winner.value} wins the round on {list(outcome.pattern)}")
        elif is_full(self.board.cells):
            self.status = RoundStatus.ROUND_OVER
            self.is_draw = True
            logger.info("Round ended in a draw")

        return self.result(last_move=index)

    def undo(self) -> RoundTransitionResult:
        """
        Take back the last move, or the last two against the computer so the
        human keeps the turn. Does nothing once the round is over.

        Against the computer the two steps are counted from the end of the
        history, so an undo while the computer's reply is still pending takes
        back the human move and the previous computer move, leaving the
        computer to move again.
        """
        if not self.board.history or self.is_round_over:
            return self.result()

        steps = 2 if self.config.mode == Mode.CPU else 1
        for _ in range(steps):
            if not self.board.history:
                break
            self.board.remove(self.board.history[-1])

        logger.debug(f"Undo {steps} step(s), {len(self.board.history)} move(s) left")
        return self.result()

    def reset_round(self, keep_starter: bool = True,
                    starter: Optional[Mark] = None) -> RoundTransitionResult:
        """
        Clear the grid for a new round.

        With ``keep_starter`` false the opening move alternates in PvP, while
        against the computer the human (X) always opens. An explicit
        ``starter`` overrides both.
        """
        if starter is not None:
            self.starter = starter
        elif not keep_starter:
            if self.config.mode == Mode.PVP:
                self.starter = self.starter.other()
            else:
                self.starter = Mark.X

        self.board.clear()
        self.status = RoundStatus.IN_PROGRESS
        self.winner = None
        self.pattern = None
        self.is_draw = False
        self.round_number += 1
        return self.result()

    def result(self, last_move: Optional[int] = None) -> RoundTransitionResult:
        return RoundTransitionResult(
            status=self.status,
            current_player=self.current_player,
            board=list(self.board.cells),
            history=list(self.board.history),
            winner=self.winner,
            pattern=self.pattern,
            is_draw=self.is_draw,
            last_move=last_move,
        )
