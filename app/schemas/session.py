from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from typing import Annotated, List, Optional
from enum import Enum

from app.core.game_config import (
    BEST_OF_CHOICES, CELL_COUNT, DEFAULT_BEST_OF, DEFAULT_DIFFICULTY, DEFAULT_MODE,
    DEFAULT_PLAYER_O_NAME, DEFAULT_PLAYER_X_NAME, Difficulty, Mark, Mode
)


class RoundStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    ROUND_OVER = "round_over"


class Player(str, Enum):
    X = "X"
    O = "O"


def _check_best_of(v: int) -> int:
    if v not in BEST_OF_CHOICES:
        raise ValueError(f"best_of must be one of {list(BEST_OF_CHOICES)}")
    return v


BestOf = Annotated[int, AfterValidator(_check_best_of)]


class SessionCreate(BaseModel):
    session_key: Optional[str] = Field(None, description="Resume a saved session instead of starting fresh")
    mode: Mode = Field(DEFAULT_MODE, description="pvp or cpu")
    difficulty: Difficulty = Field(DEFAULT_DIFFICULTY, description="Computer strength in cpu mode")
    best_of: BestOf = Field(DEFAULT_BEST_OF, description="Match length: 1, 3 or 5 rounds")
    player_x_name: Optional[str] = Field(None, max_length=50)
    player_o_name: Optional[str] = Field(None, max_length=50)


class MoveCreate(BaseModel):
    index: int = Field(..., ge=0, le=CELL_COUNT - 1, description="Cell index, 0-8 in row-major order")
    player: Optional[Player] = Field(None, description="Mark of the mover; must be the player to move")


class ResetRound(BaseModel):
    keep_starter: bool = Field(True, description="Keep who opens the round")


class SettingsUpdate(BaseModel):
    mode: Optional[Mode] = None
    difficulty: Optional[Difficulty] = None
    best_of: Optional[BestOf] = None
    player_x_name: Optional[str] = Field(None, max_length=50)
    player_o_name: Optional[str] = Field(None, max_length=50)
    sound_on: Optional[bool] = None
    theme_light: Optional[bool] = None


class RoundState(BaseModel):
    status: RoundStatus
    board: List[str]
    history: List[int]
    current_player: Player
    starter: Player
    winner: Optional[Player] = None
    winning_pattern: Optional[List[int]] = None
    is_draw: bool = False
    last_move: Optional[int] = None


class MatchState(BaseModel):
    x_wins: int
    o_wins: int
    draws: int
    target_wins: int
    is_over: bool
    winner: Optional[Player] = None
    score_x: int
    score_o: int
    score_draws: int


class SessionSettings(BaseModel):
    mode: Mode
    difficulty: Difficulty
    best_of: int
    player_x_name: str
    player_o_name: str
    sound_on: bool
    theme_light: bool


class SessionState(BaseModel):
    session_key: str
    round: RoundState
    match: MatchState
    settings: SessionSettings
    is_computer_turn: bool
    computer_move_pending: bool = False


class ComputerMoveSuggestion(BaseModel):
    index: int
    player: Player


class PersistedSettings(BaseModel):
    """
    The flat settings/score record kept between visits.

    Field names on the wire are camelCase to stay compatible with blobs
    saved by the browser front-end.
    """
    mode: Mode = DEFAULT_MODE
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    best_of: BestOf = Field(DEFAULT_BEST_OF, alias="bestOf")
    match_x: int = Field(0, ge=0, alias="matchX")
    match_o: int = Field(0, ge=0, alias="matchO")
    draws: int = Field(0, ge=0)
    score_x: int = Field(0, ge=0, alias="scoreX")
    score_o: int = Field(0, ge=0, alias="scoreO")
    score_d: int = Field(0, ge=0, alias="scoreD")
    player_x_name: str = Field(DEFAULT_PLAYER_X_NAME, alias="playerXName")
    player_o_name: str = Field(DEFAULT_PLAYER_O_NAME, alias="playerOName")
    sound_on: bool = Field(True, alias="soundOn")
    theme_light: bool = Field(False, alias="themeLight")
    round_starter: Mark = Field(Mark.X, alias="roundStarter")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("round_starter")
    def starter_is_a_player(cls, v):
        if v == Mark.EMPTY:
            raise ValueError("roundStarter must be X or O")
        return v

    def to_blob(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
