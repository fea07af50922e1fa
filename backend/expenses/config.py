import os
from functools import lru_cache
from pathlib import Path
from pydantic import BaseModel

# Data directory: use EXPENSES_DATA_DIR if set (e.g. /data in Docker),
# otherwise fall back to ~/.config/expenses for local dev
DEFAULT_DATA_DIR = Path.home() / ".config" / "expenses"
DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]  # Vite dev server


class Settings(BaseModel):
    """Runtime settings read from the environment."""
    data_dir: Path = DEFAULT_DATA_DIR
    database_url: str | None = None
    log_level: str = "INFO"
    cors_origins: list[str] = DEFAULT_CORS_ORIGINS

    @property
    def resolved_database_url(self) -> str:
        """Explicit URL, or a SQLite file inside the data directory."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'expenses.db'}"


def ensure_data_dir(settings: Settings) -> None:
    """Ensure the data directory exists."""
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def load_settings() -> Settings:
    """Build settings from EXPENSES_* environment variables."""
    values: dict = {}

    data_dir = os.environ.get("EXPENSES_DATA_DIR")
    if data_dir:
        values["data_dir"] = Path(data_dir)

    database_url = os.environ.get("EXPENSES_DATABASE_URL")
    if database_url:
        values["database_url"] = database_url

    log_level = os.environ.get("EXPENSES_LOG_LEVEL")
    if log_level:
        values["log_level"] = log_level.upper()

    origins = os.environ.get("EXPENSES_CORS_ORIGINS")
    if origins:
        values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

    return Settings(**values)


@lru_cache
def get_settings() -> Settings:
    """Cached settings for the running process."""
    return load_settings()
