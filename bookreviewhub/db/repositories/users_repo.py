"""Repository helpers for site accounts."""
from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError

from bookreviewhub.db import app_session
from bookreviewhub.db.models import User


class UserExistsError(Exception):
    """Raised when attempting to register an email that is already taken."""


class SqlUserRepository:
    def get_by_email(self, email: str) -> Optional[User]:
        with app_session() as session:
            return session.query(User).filter(User.email == email).one_or_none()

    def add(self, user: User) -> User:
        try:
            with app_session() as session:
                session.add(user)
        except IntegrityError as exc:
            raise UserExistsError("user_exists") from exc
        return user


__all__ = ["UserExistsError", "SqlUserRepository"]
