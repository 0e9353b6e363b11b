"""Application logging helpers.

All loggers live under the ``bookreviewhub`` namespace. Only that package
logger carries a handler; module loggers (``bookreviewhub.books_service`` ...)
propagate to it, so the level from `config.log_level_name()` is applied in
one place.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from bookreviewhub import config as app_config

ROOT_LOGGER_NAME = "bookreviewhub"
LOG_FORMAT = "[bookreviewhub] %(asctime)s %(levelname)s %(name)s %(message)s"

_LOCK = threading.Lock()
_ROOT: Optional[logging.Logger] = None


def _configure_root() -> logging.Logger:
    global _ROOT
    if _ROOT is not None:
        return _ROOT
    with _LOCK:
        if _ROOT is not None:
            return _ROOT
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(getattr(logging, app_config.log_level_name(), logging.INFO))
        if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)
        # records stop at the package logger
        root.propagate = False
        _ROOT = root
        return root


def qualified_name(name: str) -> str:
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    root = _configure_root()
    full_name = qualified_name(name)
    if full_name == ROOT_LOGGER_NAME:
        return root
    return logging.getLogger(full_name)


__all__ = ["ROOT_LOGGER_NAME", "LOG_FORMAT", "qualified_name", "get_logger"]
