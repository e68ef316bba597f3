import asyncio

import pytest

from app.core.exceptions import SessionNotFound
from app.core.game_config import Difficulty, Mark, Mode
from app.services.session_manager import SessionManager


@pytest.fixture
def manager(test_db):
    return SessionManager(session_factory=test_db, move_delay=0.05)


def cpu_session(manager, db_session):
    return manager.create_session(db_session, mode=Mode.CPU, difficulty=Difficulty.HARD)


class TestSessionRegistry:

    def test_create_and_get(self, manager, db_session):
        key, session = manager.create_session(db_session)
        assert manager.get_session(db_session, key) is session

    def test_restore_from_saved_blob(self, manager, db_session):
        key, session = manager.create_session(db_session, best_of=5, player_x_name="Ada")
        for index in [0, 3, 1, 4, 2]:
            session.apply_move(index)
        manager.save(db_session, key)

        fresh = SessionManager(session_factory=manager.session_factory, move_delay=0)
        restored = fresh.get_session(db_session, key)
        assert restored is not session
        assert restored.match.state.round_wins_x == 1
        assert restored.config.player_x_name == "Ada"
        assert restored.engine.board.history == []

    def test_unknown_session(self, manager, db_session):
        with pytest.raises(SessionNotFound):
            manager.get_session(db_session, "missing")

    def test_least_recently_used_sessions_evicted(self, test_db, db_session):
        manager = SessionManager(session_factory=test_db, move_delay=0, max_sessions=3)
        keys = [manager.create_session(db_session)[0] for _ in range(3)]
        # Touching the oldest makes the second one the next to go
        manager.get_session(db_session, keys[0])
        newest, _ = manager.create_session(db_session)

        assert len(manager.sessions) == 3
        assert keys[1] not in manager.sessions
        assert set(manager.sessions) == {keys[0], keys[2], newest}

    def test_registry_stays_bounded(self, test_db, db_session):
        manager = SessionManager(session_factory=test_db, move_delay=0, max_sessions=10)
        for _ in range(50):
            manager.create_session(db_session)
        assert len(manager.sessions) == 10

    def test_evicted_session_restores_score(self, test_db, db_session):
        manager = SessionManager(session_factory=test_db, move_delay=0, max_sessions=1)
        key, session = manager.create_session(db_session, best_of=5)
        for index in [0, 3, 1, 4, 2]:
            session.apply_move(index)
        manager.save(db_session, key)
        manager.create_session(db_session)
        assert key not in manager.sessions

        restored = manager.get_session(db_session, key)
        assert restored is not session
        assert restored.match.state.round_wins_x == 1
        assert len(manager.sessions) == 1

    def test_close_session(self, manager, db_session):
        key, session = manager.create_session(db_session)
        assert manager.close_session(key) is True
        assert key not in manager.sessions
        assert manager.close_session(key) is False
        # Still saved, so it can be resumed
        assert manager.get_session(db_session, key) is not session

    def test_inline_reply_without_delay(self, test_db, db_session):
        manager = SessionManager(session_factory=test_db, move_delay=0)
        key, session = cpu_session(manager, db_session)
        session.apply_move(4)
        manager.settle(db_session, key)
        assert session.engine.board.history == [4, 0]
        assert not manager.has_pending_move(key)


class TestComputerTurnScheduling:

    def test_reply_arrives_after_delay(self, manager, db_session):
        key, session = cpu_session(manager, db_session)

        async def scenario():
            session.apply_move(4)
            manager.settle(db_session, key)
            assert manager.has_pending_move(key)
            assert session.engine.board.history == [4]
            await asyncio.sleep(0.2)

        asyncio.run(scenario())
        assert session.engine.board.history == [4, 0]
        assert session.current_player == Mark.X
        assert not manager.has_pending_move(key)

    def test_undo_cancels_pending_reply(self, manager, db_session):
        key, session = cpu_session(manager, db_session)

        async def scenario():
            session.apply_move(4)
            manager.settle(db_session, key)
            assert manager.cancel_computer_move(key) is True
            session.undo()
            await asyncio.sleep(0.2)

        asyncio.run(scenario())
        assert session.engine.board.history == []
        assert session.current_player == Mark.X

    def test_reset_discards_stale_reply(self, manager, db_session):
        key, session = cpu_session(manager, db_session)

        async def scenario():
            session.apply_move(4)
            manager.settle(db_session, key)
            # Board cleared without cancelling: the fired task must notice
            session.reset_round()
            await asyncio.sleep(0.2)

        asyncio.run(scenario())
        assert session.engine.board.history == []

    def test_no_reply_scheduled_in_pvp(self, manager, db_session):
        key, session = manager.create_session(db_session, mode=Mode.PVP)

        async def scenario():
            session.apply_move(4)
            manager.settle(db_session, key)
            return manager.has_pending_move(key)

        assert asyncio.run(scenario()) is False

    def test_busy_session_not_evicted(self, test_db, db_session):
        manager = SessionManager(session_factory=test_db, move_delay=0.05, max_sessions=1)
        key, session = cpu_session(manager, db_session)

        async def scenario():
            session.apply_move(4)
            manager.settle(db_session, key)
            other, _ = manager.create_session(db_session)
            # Over the limit for now; the pending reply keeps the first one live
            assert key in manager.sessions
            assert other in manager.sessions
            await asyncio.sleep(0.2)

        asyncio.run(scenario())
        assert session.engine.board.history == [4, 0]

    def test_close_cancels_pending_reply(self, manager, db_session):
        key, session = cpu_session(manager, db_session)

        async def scenario():
            session.apply_move(4)
            manager.settle(db_session, key)
            assert manager.close_session(key) is True
            assert not manager.has_pending_move(key)
            await asyncio.sleep(0.2)

        asyncio.run(scenario())
        assert session.engine.board.history == [4]

    def test_clear_cancels_everything(self, manager, db_session):
        key, session = cpu_session(manager, db_session)

        async def scenario():
            session.apply_move(4)
            manager.settle(db_session, key)
            manager.clear()
            await asyncio.sleep(0.2)

        asyncio.run(scenario())
        assert manager.sessions == {}
        assert session.engine.board.history == [4]
