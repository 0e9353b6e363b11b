"""Database layer root: engine/session management re-exports."""

from .engine import (
    init_engine_once,
    get_scoped_session,
    app_session,
)

__all__ = [
    "init_engine_once",
    "get_scoped_session",
    "app_session",
]
