"""Runtime configuration for readinglog.

Values come from the environment (a ``.env`` file is loaded first when present).
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"
DEFAULT_DB_PATH = "data/readinglog.db"
DEFAULT_PREFERENCES_PATH = "data/preferences.json"

# Placeholder shipped in example .env files
PLACEHOLDER_API_KEY = "your_api_key_here"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def is_valid_api_key(api_key: str) -> bool:
    """Return True if the key looks like a real Google Books key."""
    return bool(api_key) and api_key != PLACEHOLDER_API_KEY and len(api_key) > 10


@dataclass
class Settings:
    """Application settings."""
    google_books_api_key: str = ""
    google_books_url: str = DEFAULT_GOOGLE_BOOKS_URL
    google_books_rate_limit_per_minute: float = 100.0
    google_books_timeout: float = 10.0
    db_path: str = DEFAULT_DB_PATH
    preferences_path: str = DEFAULT_PREFERENCES_PATH
    search_debounce_seconds: float = 0.5
    search_fetch_size: int = 40
    search_result_limit: int = 20
    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from environment variables."""
        if load_env_file:
            load_dotenv()
        return cls(
            google_books_api_key=os.getenv("GOOGLE_BOOKS_API_KEY", ""),
            google_books_url=os.getenv("GOOGLE_BOOKS_URL", DEFAULT_GOOGLE_BOOKS_URL),
            google_books_rate_limit_per_minute=_env_float("GOOGLE_BOOKS_RATE_LIMIT_PER_MINUTE", 100.0),
            google_books_timeout=_env_float("GOOGLE_BOOKS_TIMEOUT", 10.0),
            db_path=os.getenv("READINGLOG_DB_PATH", DEFAULT_DB_PATH),
            preferences_path=os.getenv("READINGLOG_PREFERENCES_PATH", DEFAULT_PREFERENCES_PATH),
            search_debounce_seconds=_env_float("SEARCH_DEBOUNCE_SECONDS", 0.5),
            search_fetch_size=_env_int("SEARCH_FETCH_SIZE", 40),
            search_result_limit=_env_int("SEARCH_RESULT_LIMIT", 20),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
        )

    @property
    def use_json_logs(self) -> bool:
        return self.log_format.lower() == "json"

    @property
    def has_valid_api_key(self) -> bool:
        return is_valid_api_key(self.google_books_api_key)
