"""Database engine & session management.

A single process-wide engine plus a scoped session registry. Request code
works through `app_session()`, which commits on success and rolls back on any
exception. Objects stay usable after the session closes (`expire_on_commit`
is off), so repositories eager-load every relationship a caller may touch.
"""
from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session as SASession
from sqlalchemy.orm import scoped_session, sessionmaker

from bookreviewhub import config as app_config
from bookreviewhub.db.models import Base
from bookreviewhub.utils.logging import get_logger

_engine: Optional[Engine] = None
_SessionFactory: Optional[Callable[[], SASession]] = None
_scoped: Optional[scoped_session] = None
_LOCK = threading.Lock()

LOG = get_logger("bookreviewhub.db")


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # ON DELETE CASCADE on reviews/votes is only honoured with this pragma.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _ensure_sqlite_parent_dir(url: str) -> None:
    path = url[len("sqlite:///"):]
    if not path or path == ":memory:":
        return
    parent_dir = os.path.dirname(os.path.abspath(path)) or "."
    os.makedirs(parent_dir, exist_ok=True)
    if not os.access(parent_dir, os.W_OK):
        raise RuntimeError(f"bookreviewhub DB directory not writable: {parent_dir}")


def init_engine_once() -> None:
    global _engine, _SessionFactory, _scoped
    if _engine is not None:
        return
    with _LOCK:
        if _engine is not None:
            return
        url = app_config.get_database_url()
        LOG.info("Initializing database engine at %s", url)
        if url.startswith("sqlite:///"):
            _ensure_sqlite_parent_dir(url)
        _engine = create_engine(url, future=True)
        if _engine.dialect.name == "sqlite":
            event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
        _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False, class_=SASession)
        _scoped = scoped_session(_SessionFactory)
        _safe_create_schema()
        LOG.debug("bookreviewhub schema ready")


def _safe_create_schema() -> None:
    """Run metadata.create_all, tolerating a concurrent worker creating it first."""
    if _engine is None:
        return
    try:
        Base.metadata.create_all(_engine)
    except OperationalError as e:  # pragma: no cover - concurrency edge
        if "already exists" in str(e).lower():
            LOG.warning("Schema create encountered existing tables (benign race)")
        else:
            raise


def get_scoped_session() -> scoped_session:
    if _scoped is None:
        init_engine_once()
    if _scoped is None:
        raise RuntimeError("Scoped session could not be initialized.")
    return _scoped


@contextmanager
def app_session() -> Iterator[SASession]:
    scoped = get_scoped_session()
    sess = scoped()
    try:
        yield sess
        sess.commit()
    except Exception:
        sess.rollback()
        raise
    finally:
        sess.close()


def remove_scoped_session(_exc: Optional[BaseException] = None) -> None:
    """Flask teardown hook: drop the thread-local session at request end."""
    if _scoped is not None:
        _scoped.remove()


def reset_for_tests(drop: bool = False) -> None:
    global _engine, _SessionFactory, _scoped
    with _LOCK:
        if _engine is not None and drop:
            try:
                Base.metadata.drop_all(_engine)
            except Exception:
                LOG.warning("Failed dropping tables during reset", exc_info=True)
        if _scoped is not None:
            _scoped.remove()
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _SessionFactory = None
        _scoped = None


__all__ = [
    "init_engine_once",
    "get_scoped_session",
    "app_session",
    "remove_scoped_session",
    "reset_for_tests",
]
