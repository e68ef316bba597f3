"""
Live game sessions and the delayed computer turn.
"""
import asyncio
import logging
import uuid
from collections import OrderedDict
from typing import Callable, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import SessionLocal
from app.core.exceptions import SessionNotFound
from app.core.game_config import Difficulty, Mode
from app.services.game_session import GameSession
from app.services.match_controller import GameConfiguration
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Registry of live sessions keyed by session key.

    Every transition runs to completion on the event loop, so two moves on
    one session never interleave. The only deferred work is the computer's
    reply, which waits ``move_delay`` seconds and is cancelled by anything
    that changes the board underneath it.

    At most ``max_sessions`` sessions stay live. Beyond that the least
    recently used idle ones are dropped; their settings and score are already
    saved, so the next request for them restores a fresh board.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal,
                 move_delay: Optional[float] = None,
                 max_sessions: Optional[int] = None):
        self.sessions: "OrderedDict[str, GameSession]" = OrderedDict()
        self.pending_moves: Dict[str, asyncio.Task] = {}
        self.session_factory = session_factory
        self._move_delay = move_delay
        self._max_sessions = max_sessions

    @property
    def move_delay(self) -> float:
        if self._move_delay is not None:
            return self._move_delay
        return settings.COMPUTER_MOVE_DELAY

    @property
    def max_sessions(self) -> int:
        if self._max_sessions is not None:
            return self._max_sessions
        return settings.MAX_LIVE_SESSIONS

    def create_session(self, db: Session, mode: Mode = Mode.PVP,
                       difficulty: Difficulty = Difficulty.MEDIUM, best_of: int = 3,
                       player_x_name: Optional[str] = None,
                       player_o_name: Optional[str] = None) -> Tuple[str, GameSession]:
        session_key = uuid.uuid4().hex
        config = GameConfiguration(
            mode=Mode(mode),
            difficulty=Difficulty(difficulty),
            best_of=best_of,
            player_x_name=player_x_name,
            player_o_name=player_o_name,
        )
        session = GameSession(config)
        self._remember(session_key, session)
        self.save(db, session_key)

        logger.info(
            f"Session {session_key} created: {config.mode.value}, "
            f"{config.difficulty.value}, best of {config.best_of}"
        )
        return session_key, session

    def get_session(self, db: Session, session_key: str) -> GameSession:
        """Return a live session, restoring it from its saved blob if needed."""
        session = self.sessions.get(session_key)
        if session is not None:
            self.sessions.move_to_end(session_key)
            return session

        saved = SessionStore(db).load(session_key)
        if saved is None:
            raise SessionNotFound(f"Session {session_key} not found")

        session = GameSession.from_persisted(saved)
        self._remember(session_key, session)
        logger.info(f"Session {session_key} restored from saved settings")
        return session

    def save(self, db: Session, session_key: str) -> bool:
        session = self.sessions.get(session_key)
        if session is None:
            return False
        return SessionStore(db).save(session_key, session.to_persisted())

    def close_session(self, session_key: str) -> bool:
        """
        Drop a live session and any pending computer reply. The saved blob is
        kept, so the session can still be resumed. Returns True if it was live.
        """
        self.cancel_computer_move(session_key)
        session = self.sessions.pop(session_key, None)
        if session is None:
            return False
        logger.info(f"Session {session_key} closed")
        return True

    def _remember(self, session_key: str, session: GameSession) -> None:
        self.sessions[session_key] = session
        self.sessions.move_to_end(session_key)
        self._evict_idle(keep=session_key)

    def _evict_idle(self, keep: str) -> None:
        """Drop least recently used sessions over the limit, skipping busy ones."""
        excess = len(self.sessions) - self.max_sessions
        if excess <= 0:
            return
        for session_key in list(self.sessions):
            if excess <= 0:
                break
            if session_key == keep or self.has_pending_move(session_key):
                continue
            del self.sessions[session_key]
            self.pending_moves.pop(session_key, None)
            excess -= 1
            logger.info(f"Session {session_key} evicted from memory")

    def settle(self, db: Session, session_key: str) -> GameSession:
        """
        Persist the session after a transition and, if the computer is now to
        move, answer inline (no delay) or schedule the reply.
        """
        session = self.sessions[session_key]
        if session.is_computer_turn and not self.has_pending_move(session_key):
            if self.move_delay <= 0:
                session.play_computer_move()
            else:
                self.schedule_computer_move(session_key)
        self.save(db, session_key)
        return session

    # Computer turn scheduling

    def has_pending_move(self, session_key: str) -> bool:
        task = self.pending_moves.get(session_key)
        return task is not None and not task.done()

    def schedule_computer_move(self, session_key: str) -> asyncio.Task:
        """Start the delayed computer reply. Needs a running event loop."""
        self.cancel_computer_move(session_key)
        session = self.sessions[session_key]
        task = asyncio.create_task(
            self._computer_turn(
                session_key,
                session.engine.round_number,
                len(session.engine.board.history),
            )
        )
        self.pending_moves[session_key] = task
        return task

    def cancel_computer_move(self, session_key: str) -> bool:
        """Drop a pending computer reply. Returns True if one was waiting."""
        task = self.pending_moves.pop(session_key, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug(f"Cancelled pending computer move for session {session_key}")
        return True

    async def _computer_turn(self, session_key: str, round_number: int, moves_played: int) -> None:
        try:
            await asyncio.sleep(self.move_delay)
        except asyncio.CancelledError:
            logger.debug(f"Computer turn for session {session_key} cancelled")
            raise

        if self.pending_moves.get(session_key) is asyncio.current_task():
            del self.pending_moves[session_key]

        session = self.sessions.get(session_key)
        if session is None:
            return
        # The board may have moved on since this turn was scheduled
        if (session.engine.round_number != round_number
                or len(session.engine.board.history) != moves_played
                or not session.is_computer_turn):
            logger.debug(f"Discarding stale computer turn for session {session_key}")
            return

        try:
            session.play_computer_move()
            with self.session_factory() as db:
                self.save(db, session_key)
        except Exception as e:
            logger.error(f"Computer move failed for session {session_key}: {e}", exc_info=True)

    def clear(self) -> None:
        for session_key in list(self.pending_moves):
            self.cancel_computer_move(session_key)
        self.sessions.clear()


session_manager_obj = SessionManager()
