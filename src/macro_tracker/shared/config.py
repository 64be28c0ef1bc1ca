"""Configuration management for Macro Tracker."""
import os
from pathlib import Path

from dotenv import load_dotenv

from macro_tracker.macros.catalog import SessionFilters

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).resolve().parents[3]
    DATA_DIR = ROOT_DIR / "data"
    LOGS_DIR = ROOT_DIR / "logs"
    EXPORT_DIR = DATA_DIR / "exports"

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'macro_tracker.db'}")
    DB_ECHO: bool = _env_bool("DB_ECHO", False)

    # Owner of the log rows; every store query is scoped to it
    USER_ID: str = os.getenv("MACRO_USER_ID", "local")

    # Session toggles
    SHOW_ASIA_MACROS: bool = _env_bool("SHOW_ASIA_MACROS", False)
    SHOW_LONDON_MACROS: bool = _env_bool("SHOW_LONDON_MACROS", True)
    SHOW_NY_MACROS: bool = _env_bool("SHOW_NY_MACROS", True)

    # Scheduler host
    TICK_INTERVAL_SECONDS: float = float(os.getenv("TICK_INTERVAL_SECONDS", "1.0"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if cls.TICK_INTERVAL_SECONDS <= 0:
            raise ValueError("TICK_INTERVAL_SECONDS must be positive")
        if not cls.USER_ID:
            raise ValueError("MACRO_USER_ID not set in environment")

    @classmethod
    def session_filters(cls) -> SessionFilters:
        """Session toggles as configured in the environment."""
        return SessionFilters(
            show_asia_macros=cls.SHOW_ASIA_MACROS,
            show_london_macros=cls.SHOW_LONDON_MACROS,
            show_ny_macros=cls.SHOW_NY_MACROS,
        )


config = Config()
