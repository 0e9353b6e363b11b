"""Minimal account registration and password checks for the session login."""
from __future__ import annotations

from typing import Dict, Optional

from flask_babel import gettext as _
from werkzeug.security import check_password_hash, generate_password_hash

from bookreviewhub.db.models import User
from bookreviewhub.db.repositories import SqlUserRepository, UserExistsError, UserRepository
from bookreviewhub.services.errors import ValidationFailedError
from bookreviewhub.utils.identity import normalize_email
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("auth_service")

MIN_PASSWORD_LENGTH = 6

_default_users: UserRepository = SqlUserRepository()


def _users(repo: Optional[UserRepository]) -> UserRepository:
    return repo if repo is not None else _default_users


def register_user(
    email: Optional[str],
    password: Optional[str],
    name: Optional[str] = None,
    *,
    users: Optional[UserRepository] = None,
) -> User:
    errors: Dict[str, str] = {}
    normalized = normalize_email(email)
    if not normalized or "@" not in normalized:
        errors["email"] = _("Enter a valid email address.")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = _("Password must be at least %(count)s characters.", count=MIN_PASSWORD_LENGTH)
    if errors:
        raise ValidationFailedError(errors)
    repo = _users(users)
    if repo.get_by_email(normalized):  # type: ignore[arg-type]
        raise UserExistsError("user_exists")
    user = User(
        email=normalized,
        name=(name or "").strip() or normalized,
        password_hash=generate_password_hash(password),  # type: ignore[arg-type]
    )
    repo.add(user)
    LOG.info("Registered user id=%s email=%s", user.id, normalized)
    return user


def authenticate(
    email: Optional[str],
    password: Optional[str],
    *,
    users: Optional[UserRepository] = None,
) -> Optional[User]:
    """Return the user when the email/password pair matches, else None."""
    normalized = normalize_email(email)
    if not normalized or not password:
        return None
    user = _users(users).get_by_email(normalized)
    if not user or not check_password_hash(user.password_hash, password):
        LOG.info("Failed login attempt email=%s", normalized)
        return None
    return user


__all__ = [
    "MIN_PASSWORD_LENGTH",
    "register_user",
    "authenticate",
]
