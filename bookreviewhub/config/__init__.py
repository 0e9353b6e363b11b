"""Application configuration accessors.

Centralizes environment variable parsing & defaults so the rest of the code
never reads ``os.environ`` directly.
"""
from __future__ import annotations

import os

DEFAULT_DB_PATH = "bookreviewhub.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SECRET_KEY = "dev-secret-change-me"
_TRUE = {"1", "true", "yes", "on"}


def _raw_env(name: str, default: str | None = None) -> str | None:
    val = os.getenv(name)
    return val if val is not None else default


def env_bool(name: str, default: bool = False) -> bool:
    raw = _raw_env(name, str(default).lower())
    if raw is None:
        return default
    return raw.lower() in _TRUE


def get_db_path() -> str:
    return _raw_env("BOOKREVIEWHUB_DB_PATH", DEFAULT_DB_PATH)  # type: ignore[return-value]


def get_database_url() -> str:
    """Full SQLAlchemy URL; falls back to a SQLite file at `get_db_path()`."""
    url = _raw_env("BOOKREVIEWHUB_DATABASE_URL")
    if url and url.strip():
        return url.strip()
    return f"sqlite:///{get_db_path()}"


def log_level_name() -> str:
    return _raw_env("BOOKREVIEWHUB_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()  # type: ignore[union-attr]


def secret_key() -> str:
    value = _raw_env("BOOKREVIEWHUB_SECRET_KEY")
    if value is None or not value.strip():
        return DEFAULT_SECRET_KEY
    return value.strip()


def seed_on_start() -> bool:
    """Whether `create_app` inserts the sample books into an empty database.

    Environment Variable: BOOKREVIEWHUB_SEED_ON_START
    """
    return env_bool("BOOKREVIEWHUB_SEED_ON_START", default=False)


def summarize_runtime_config() -> dict:
    return {
        "database_url": get_database_url(),
        "log_level": log_level_name(),
        "seed_on_start": seed_on_start(),
    }


__all__ = [
    "env_bool",
    "get_db_path",
    "get_database_url",
    "log_level_name",
    "secret_key",
    "seed_on_start",
    "summarize_runtime_config",
]
