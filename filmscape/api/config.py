"""
API configuration loaded from environment or defaults.
"""

import os
from pathlib import Path


def get_database_path() -> str:
    """Get database file path (or full URL for non-SQLite backends) from env or default."""
    url = os.getenv("DATABASE_URL", "")
    if url.startswith("sqlite:///"):
        url = url.replace("sqlite:///", "", 1)
    return url or str(Path(__file__).resolve().parents[2] / "data" / "filmscape.db")


def get_log_level() -> str:
    """Get log level from env or default."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_file() -> str:
    """Get log file name; empty string disables file logging."""
    return os.getenv("LOG_FILE", "api.log")


def get_environment() -> str:
    """Get deployment environment name ('development' exposes stack traces)."""
    return os.getenv("APP_ENV", "production").lower()


def is_development() -> bool:
    return get_environment() == "development"


def get_max_body_bytes() -> int:
    """Largest accepted request body, in bytes."""
    return int(os.getenv("MAX_BODY_BYTES", str(1024 * 1024)))


def get_api_host() -> str:
    """Get API host for binding."""
    return os.getenv("API_HOST", "0.0.0.0")


def get_api_port() -> int:
    """Get API port."""
    return int(os.getenv("API_PORT", "8000"))


def get_omdb_api_key() -> str | None:
    """Get OMDb API key, if configured."""
    return os.getenv("OMDB_API_KEY") or None


def get_omdb_base_url() -> str:
    return os.getenv("OMDB_BASE_URL", "https://www.omdbapi.com/")


def get_omdb_timeout() -> float:
    return float(os.getenv("OMDB_TIMEOUT", "8"))


def get_omdb_retries() -> int:
    return int(os.getenv("OMDB_RETRIES", "2"))


def get_admin_username() -> str:
    return os.getenv("ADMIN_USERNAME", "admin")


def get_admin_email() -> str:
    return os.getenv("ADMIN_EMAIL", "admin@filmscape.com")
