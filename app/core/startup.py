"""
Application startup and shutdown logic for the TicTacToe API.
"""
import logging
from sqlalchemy import text

from app.core.database import engine, init_db
from app.services.session_manager import session_manager_obj

logger = logging.getLogger(__name__)


def initialize_database() -> None:
    """Initialize database tables and warm up connection pool."""
    try:
        init_db()
        logger.info("Database tables created/verified")

        # Warm up the connection pool
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection pool initialized")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def shutdown_database() -> None:
    """Drop pending computer turns and clean up database connections."""
    try:
        session_manager_obj.clear()
        engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during database shutdown: {e}")
        # Don't re-raise during shutdown
