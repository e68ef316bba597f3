from pydantic_settings import BaseSettings, SettingsConfigDict
import os

class Settings(BaseSettings):
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./tictactoe.db"
    )
    DEBUG: bool = os.getenv("DEBUG", "False") == "True"
    # Pause before the computer answers a human move, in seconds
    COMPUTER_MOVE_DELAY: float = float(os.getenv("COMPUTER_MOVE_DELAY", "0.22"))
    # Live sessions kept in memory; older idle ones are reloaded from the database on demand
    MAX_LIVE_SESSIONS: int = int(os.getenv("MAX_LIVE_SESSIONS", "1000"))

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
