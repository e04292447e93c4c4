from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Local store
    DATABASE_URL: str = "sqlite:///./myos.db"
    DEBUG: bool = False  # Echo SQL statements
    LOG_LEVEL: str = "INFO"

    # Sync
    SYNC_INTERVAL_SECONDS: float = 300.0  # Periodic sync cadence (5 minutes)
    SYNC_ON_STARTUP: bool = True
    REMOTE_TIMEOUT_SECONDS: float = 10.0  # Upper bound for every remote call
    REMOTE_SCHEMA_PATH: str = "/rest/v1"

    # Domain rules
    UNDO_WINDOW_SECONDS: float = 5.0
    HABIT_LOG_MAX_AGE_DAYS: int = 7
    ACTION_LOG_LIST_LIMIT: int = 50
    SEARCH_MIN_QUERY_LENGTH: int = 2
    SEARCH_RESULTS_PER_GROUP: int = 5

    # Optional bootstrap of the remote endpoint (normally set from the settings screen)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        extra = "ignore"  # Allow extra fields in .env file

settings = Settings()
