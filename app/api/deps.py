"""
Dependency injection for API endpoints.
"""
from typing import Generator

from app.core.database import SessionLocal
from app.services.session_manager import SessionManager, session_manager_obj


def get_db() -> Generator:
    """
    Database dependency that ensures proper session cleanup.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_manager() -> SessionManager:
    """The process-wide registry of live game sessions."""
    return session_manager_obj
