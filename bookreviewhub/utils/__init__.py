"""Utility helpers."""
from .identity import (
    normalize_email,
    get_current_user_id,
    get_current_user_email,
    remember_identity,
    clear_identity_session,
)

__all__ = [
    "normalize_email",
    "get_current_user_id",
    "get_current_user_email",
    "remember_identity",
    "clear_identity_session",
]
