"""
One game as an owned state object: configuration, match and current round.
"""
import logging
import random
from typing import Optional

from app.core.exceptions import NotYourTurn
from app.core.game_config import (
    COMPUTER_MARK, COMPUTER_NAME, DEFAULT_PLAYER_O_NAME, DEFAULT_PLAYER_X_NAME,
    HUMAN_MARK, Difficulty, Mark, Mode, is_valid_best_of
)
from app.schemas.session import PersistedSettings
from app.services.match_controller import GameConfiguration, MatchController, MatchState
from app.services.move_engine import MoveEngine, RoundStatus, RoundTransitionResult
from app.services.opponent import OpponentStrategy, get_strategy

logger = logging.getLogger(__name__)


def _clean_name(name: Optional[str], default: str) -> str:
    name = (name or "").strip()
    return name or default


class GameSession:
    """
    Everything one player (or pair of players) is playing.

    All state lives on the instance; the presentation layer only reads the
    results of the public operations and calls them again.
    """

    def __init__(self, config: Optional[GameConfiguration] = None,
                 match_state: Optional[MatchState] = None,
                 sound_on: bool = True, theme_light: bool = False,
                 rng: Optional[random.Random] = None):
        self.config = config or GameConfiguration()
        self.match = MatchController(self.config, match_state)
        self.engine = MoveEngine(self.config, starter=self.match.state.round_starter)
        self.sound_on = sound_on
        self.theme_light = theme_light
        self.rng = rng or random.Random()
        self.strategy: OpponentStrategy = get_strategy(self.config.difficulty, self.rng)
        self._apply_names(self.config.player_x_name, self.config.player_o_name)

    # Round play

    @property
    def current_player(self) -> Mark:
        return self.engine.current_player

    @property
    def is_computer_turn(self) -> bool:
        return (
            self.config.mode == Mode.CPU
            and self.engine.status == RoundStatus.IN_PROGRESS
            and self.engine.current_player == COMPUTER_MARK
        )

    def apply_move(self, index: int, player: Optional[Mark] = None) -> RoundTransitionResult:
        """
        Play a human move. Against the computer the human only ever plays X,
        so a move while the computer is to move is out of turn.
        """
        if player is None and self.is_computer_turn:
            raise NotYourTurn("It's the computer's turn")
        if self.config.mode == Mode.CPU and player == COMPUTER_MARK:
            raise NotYourTurn("The computer plays O")
        return self._play(index, player)

    def _play(self, index: int, player: Optional[Mark]) -> RoundTransitionResult:
        result = self.engine.apply_move(index, player)
        if result.status == RoundStatus.ROUND_OVER:
            self.match.record_round_result(result.winner)
        return result

    def undo(self) -> RoundTransitionResult:
        return self.engine.undo()

    def reset_round(self, keep_starter: bool = True) -> RoundTransitionResult:
        result = self.engine.reset_round(keep_starter)
        self.match.state.round_starter = self.engine.starter
        return result

    def next_round(self) -> RoundTransitionResult:
        """Move on after a round: a fresh match if this one is decided."""
        if self.match.is_match_over():
            return self.start_new_match()
        return self.reset_round(keep_starter=False)

    def start_new_match(self) -> RoundTransitionResult:
        self.match.start_new_match()
        return self.engine.reset_round(starter=self.match.state.round_starter)

    # Computer opponent

    def choose_computer_move(self) -> int:
        if not self.is_computer_turn:
            raise NotYourTurn("It's not the computer's turn")
        index = self.strategy.choose_move(self.engine.board.snapshot(), COMPUTER_MARK, HUMAN_MARK)
        logger.debug(f"Computer ({self.config.difficulty.value}) chose cell {index}")
        return index

    def play_computer_move(self) -> RoundTransitionResult:
        index = self.choose_computer_move()
        return self._play(index, COMPUTER_MARK)

    # Settings

    def update_settings(self, mode: Optional[Mode] = None,
                        difficulty: Optional[Difficulty] = None,
                        best_of: Optional[int] = None,
                        player_x_name: Optional[str] = None,
                        player_o_name: Optional[str] = None,
                        sound_on: Optional[bool] = None,
                        theme_light: Optional[bool] = None) -> bool:
        """
        Change settings. Returns True when the change restarted the match,
        which happens for any change of mode, difficulty or match length.
        An invalid value raises ValueError and leaves the session unchanged.
        """
        # Validate everything before touching the session
        new_mode = Mode(mode) if mode is not None else self.config.mode
        new_difficulty = Difficulty(difficulty) if difficulty is not None else self.config.difficulty
        new_best_of = best_of if best_of is not None else self.config.best_of
        if not is_valid_best_of(new_best_of):
            raise ValueError(f"best_of must be 1, 3 or 5, got {new_best_of}")

        restart = False
        if new_mode != self.config.mode:
            self.config.mode = new_mode
            restart = True
        if new_difficulty != self.config.difficulty:
            self.config.difficulty = new_difficulty
            self.strategy = get_strategy(new_difficulty, self.rng)
            restart = True
        if new_best_of != self.config.best_of:
            self.match.set_best_of(new_best_of)
            restart = True

        self._apply_names(
            player_x_name if player_x_name is not None else self.config.player_x_name,
            player_o_name if player_o_name is not None else self.config.player_o_name,
        )
        if sound_on is not None:
            self.sound_on = sound_on
        if theme_light is not None:
            self.theme_light = theme_light

        if restart:
            logger.info(
                f"Settings changed to {self.config.mode.value}/{self.config.difficulty.value}/"
                f"best of {self.config.best_of}, restarting match"
            )
            self.start_new_match()
        return restart

    def _apply_names(self, player_x_name: Optional[str], player_o_name: Optional[str]) -> None:
        self.config.player_x_name = _clean_name(player_x_name, DEFAULT_PLAYER_X_NAME)
        if self.config.mode == Mode.CPU:
            self.config.player_o_name = COMPUTER_NAME
        else:
            name = _clean_name(player_o_name, DEFAULT_PLAYER_O_NAME)
            # Coming back from CPU mode the computer's name should not stick
            self.config.player_o_name = DEFAULT_PLAYER_O_NAME if name == COMPUTER_NAME else name

    # Persistence

    def to_persisted(self) -> PersistedSettings:
        state = self.match.state
        return PersistedSettings(
            mode=self.config.mode,
            difficulty=self.config.difficulty,
            best_of=self.config.best_of,
            match_x=state.round_wins_x,
            match_o=state.round_wins_o,
            draws=state.draws,
            score_x=state.score_x,
            score_o=state.score_o,
            score_d=state.score_draws,
            player_x_name=self.config.player_x_name,
            player_o_name=self.config.player_o_name,
            sound_on=self.sound_on,
            theme_light=self.theme_light,
            round_starter=self.engine.starter,
        )

    @classmethod
    def from_persisted(cls, saved: PersistedSettings,
                       rng: Optional[random.Random] = None) -> "GameSession":
        """Rebuild a session from its saved blob. The board always starts empty."""
        config = GameConfiguration(
            mode=saved.mode,
            difficulty=saved.difficulty,
            best_of=saved.best_of,
            player_x_name=saved.player_x_name,
            player_o_name=saved.player_o_name,
        )
        match_state = MatchState(
            round_wins_x=saved.match_x,
            round_wins_o=saved.match_o,
            draws=saved.draws,
            score_x=saved.score_x,
            score_o=saved.score_o,
            score_draws=saved.score_d,
            round_starter=saved.round_starter,
        )
        return cls(config, match_state, sound_on=saved.sound_on,
                   theme_light=saved.theme_light, rng=rng)
