"""Repository layer: protocols plus their SQLAlchemy implementations."""

from .interfaces import (
    BookRepository,
    ReviewRepository,
    ReviewVoteRepository,
    StaleRecordError,
    UserRepository,
)
from .books_repo import SqlBookRepository
from .reviews_repo import SqlReviewRepository
from .votes_repo import SqlReviewVoteRepository
from .users_repo import SqlUserRepository, UserExistsError

__all__ = [
    "BookRepository",
    "ReviewRepository",
    "ReviewVoteRepository",
    "UserRepository",
    "StaleRecordError",
    "SqlBookRepository",
    "SqlReviewRepository",
    "SqlReviewVoteRepository",
    "SqlUserRepository",
    "UserExistsError",
]
