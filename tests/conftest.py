import os
import random
import tempfile
import pytest

# Computer replies resolve inside the request during tests
os.environ["COMPUTER_MOVE_DELAY"] = "0"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_db
from app.core.database import Base
from app.models.saved_session import SavedSession
from app.services.session_manager import session_manager_obj
from main import app


@pytest.fixture(scope="session")
def test_db():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)

@pytest.fixture
def db_session(test_db):
    session = test_db()
    try:
        yield session
    finally:
        session.rollback()
        session.query(SavedSession).delete()
        session.commit()
        session.close()

@pytest.fixture
def rng():
    return random.Random(1234)

@pytest.fixture
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    session_manager_obj.clear()
    with TestClient(app) as c:
        yield c
    session_manager_obj.clear()
    app.dependency_overrides.clear()
