"""
Game session API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_session_manager
from app.core.game_config import Mark
from app.schemas import session as session_schemas
from app.services.game_session import GameSession
from app.services.session_manager import SessionManager

router = APIRouter(
    prefix="/sessions",
    tags=["sessions"],
    responses={404: {"description": "Session not found"}}
)


def build_state(session_key: str, session: GameSession, manager: SessionManager,
                last_move=None) -> dict:
    engine = session.engine
    match = session.match
    return {
        "session_key": session_key,
        "round": {
            "status": engine.status.value,
            "board": [cell.value for cell in engine.board.cells],
            "history": list(engine.board.history),
            "current_player": engine.current_player.value,
            "starter": engine.starter.value,
            "winner": engine.winner.value if engine.winner else None,
            "winning_pattern": list(engine.pattern) if engine.pattern else None,
            "is_draw": engine.is_draw,
            "last_move": last_move,
        },
        "match": {
            "x_wins": match.state.round_wins_x,
            "o_wins": match.state.round_wins_o,
            "draws": match.state.draws,
            "target_wins": match.match_target_wins,
            "is_over": match.is_match_over(),
            "winner": match.match_winner().value if match.match_winner() else None,
            "score_x": match.state.score_x,
            "score_o": match.state.score_o,
            "score_draws": match.state.score_draws,
        },
        "settings": {
            "mode": session.config.mode.value,
            "difficulty": session.config.difficulty.value,
            "best_of": session.config.best_of,
            "player_x_name": session.config.player_x_name,
            "player_o_name": session.config.player_o_name,
            "sound_on": session.sound_on,
            "theme_light": session.theme_light,
        },
        "is_computer_turn": session.is_computer_turn,
        "computer_move_pending": manager.has_pending_move(session_key),
    }


@router.post("", response_model=session_schemas.SessionState)
async def create_session(
        body: session_schemas.SessionCreate,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """
    Start a new game session, or resume a saved one by ``session_key``.

    A resumed session keeps its settings and match score and starts a
    fresh board.
    """
    if body.session_key:
        session_key = body.session_key
        manager.get_session(db, session_key)
    else:
        session_key, _ = manager.create_session(
            db,
            mode=body.mode,
            difficulty=body.difficulty,
            best_of=body.best_of,
            player_x_name=body.player_x_name,
            player_o_name=body.player_o_name,
        )
    session = manager.settle(db, session_key)
    return build_state(session_key, session, manager)


@router.get("/{session_key}", response_model=session_schemas.SessionState)
async def get_session_state(
        session_key: str,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """Get the board, match score and settings of a session."""
    manager.get_session(db, session_key)
    session = manager.settle(db, session_key)
    return build_state(session_key, session, manager)


@router.post("/{session_key}/moves", response_model=session_schemas.SessionState)
async def make_move(
        session_key: str,
        move: session_schemas.MoveCreate,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """
    Play a cell for the player whose turn it is.

    Rejected (400) when the round is over, the cell is taken, or it is not
    the stated player's turn. Against the computer, its reply follows after
    a short pause.
    """
    session = manager.get_session(db, session_key)
    player = Mark(move.player.value) if move.player else None
    session.apply_move(move.index, player)
    manager.settle(db, session_key)
    # Against the computer its inline reply is the latest move
    return build_state(session_key, session, manager, last_move=session.engine.board.history[-1])


@router.post("/{session_key}/undo", response_model=session_schemas.SessionState)
async def undo_move(
        session_key: str,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """
    Take back the last move (the last two against the computer).
    Has no effect once the round is over.
    """
    session = manager.get_session(db, session_key)
    manager.cancel_computer_move(session_key)
    session.undo()
    manager.settle(db, session_key)
    return build_state(session_key, session, manager)


@router.post("/{session_key}/reset-round", response_model=session_schemas.SessionState)
async def reset_round(
        session_key: str,
        body: Optional[session_schemas.ResetRound] = None,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """Clear the board. The match score is untouched."""
    session = manager.get_session(db, session_key)
    manager.cancel_computer_move(session_key)
    session.reset_round(body.keep_starter if body else True)
    manager.settle(db, session_key)
    return build_state(session_key, session, manager)


@router.post("/{session_key}/next-round", response_model=session_schemas.SessionState)
async def next_round(
        session_key: str,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """
    Continue after a round: alternate the opener in PvP, or start a new
    match once the current one has a winner.
    """
    session = manager.get_session(db, session_key)
    manager.cancel_computer_move(session_key)
    session.next_round()
    manager.settle(db, session_key)
    return build_state(session_key, session, manager)


@router.post("/{session_key}/new-match", response_model=session_schemas.SessionState)
async def new_match(
        session_key: str,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """Zero the match score and start a fresh round with X to move."""
    session = manager.get_session(db, session_key)
    manager.cancel_computer_move(session_key)
    session.start_new_match()
    manager.settle(db, session_key)
    return build_state(session_key, session, manager)


@router.get("/{session_key}/computer-move", response_model=session_schemas.ComputerMoveSuggestion)
async def suggest_computer_move(
        session_key: str,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """The cell the computer would play now, without playing it."""
    session = manager.get_session(db, session_key)
    index = session.choose_computer_move()
    return {"index": index, "player": session.current_player.value}


@router.post("/{session_key}/computer-move", response_model=session_schemas.SessionState)
async def play_computer_move(
        session_key: str,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """Play the computer's move immediately instead of waiting for it."""
    session = manager.get_session(db, session_key)
    manager.cancel_computer_move(session_key)
    result = session.play_computer_move()
    manager.settle(db, session_key)
    return build_state(session_key, session, manager, last_move=result.last_move)


@router.patch("/{session_key}/settings", response_model=session_schemas.SessionState)
async def update_settings(
        session_key: str,
        body: session_schemas.SettingsUpdate,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """
    Change settings.

    Changing mode, difficulty or match length restarts the match; names,
    sound and theme can change mid-match.
    """
    session = manager.get_session(db, session_key)
    if session.update_settings(**body.model_dump(exclude_none=True)):
        manager.cancel_computer_move(session_key)
    manager.settle(db, session_key)
    return build_state(session_key, session, manager)


@router.get("/{session_key}/export")
async def export_session(
        session_key: str,
        db: Session = Depends(get_db),
        manager: SessionManager = Depends(get_session_manager)
):
    """The saved settings and score record, in its stored camelCase form."""
    session = manager.get_session(db, session_key)
    return session.to_persisted().to_blob()


@router.post("/{session_key}/close")
async def close_session(
        session_key: str,
        manager: SessionManager = Depends(get_session_manager)
):
    """
    Release a live session. Its saved settings and score are kept, so it can
    be resumed later by ``session_key`` with a fresh board.
    """
    if manager.close_session(session_key):
        return {"success": True, "message": f"Session {session_key} closed"}
    return {"success": False, "message": f"Session {session_key} was not live"}
