"""
Database migration script to set up the initial schema.
"""
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, text

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./tictactoe.db"
)

def run_migrations():
    """Run database migrations."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        # One settings/score blob per session key
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS saved_sessions (
                session_key VARCHAR(64) PRIMARY KEY,
                data TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """))

        # Create indexes for performance (SQLite-compatible)
        for index_name, sql in [
            ("idx_saved_sessions_updated", "CREATE INDEX idx_saved_sessions_updated ON saved_sessions (updated_at);"),
        ]:
            result = conn.execute(
                text("SELECT name FROM sqlite_master WHERE type='index' AND name=:name"),
                {"name": index_name}
            )
            if not result.fetchone():
                conn.execute(text(sql))

        conn.commit()

    print("Database migrations completed successfully.")


if __name__ == "__main__":
    print("Starting database migration...")

    # Run migrations
    run_migrations()

    print("Migration complete!")
