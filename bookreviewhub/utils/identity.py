"""Session identity helpers.

The session login stores ``user_id`` and ``email``; route handlers read the
caller identity here once and pass it explicitly into the services.
"""
from __future__ import annotations

from typing import Any, Optional

from flask import session

SESSION_USER_ID_KEY = "user_id"
SESSION_EMAIL_KEY = "email"


def normalize_email(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip().lower()
    return cleaned or None


def get_current_user_id() -> Optional[str]:
    uid = session.get(SESSION_USER_ID_KEY)
    if uid is None:
        return None
    value = str(uid).strip()
    return value or None


def get_current_user_email() -> Optional[str]:
    return normalize_email(session.get(SESSION_EMAIL_KEY))


def remember_identity(user_id: str, email: Optional[str]) -> None:
    session[SESSION_USER_ID_KEY] = user_id
    if email:
        session[SESSION_EMAIL_KEY] = email
    session.modified = True


def clear_identity_session() -> None:
    session.pop(SESSION_USER_ID_KEY, None)
    session.pop(SESSION_EMAIL_KEY, None)
    session.modified = True


__all__ = [
    "SESSION_USER_ID_KEY",
    "SESSION_EMAIL_KEY",
    "normalize_email",
    "get_current_user_id",
    "get_current_user_email",
    "remember_identity",
    "clear_identity_session",
]
