"""Repository protocols.

Services depend on these capability sets rather than on the SQLAlchemy
implementations, so tests can hand in an in-memory double instead.
"""
from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

from bookreviewhub.db.models import Book, Review, ReviewVote, User


# Signed 64-bit range; larger ints overflow when bound as SQLite INTEGER.
SQL_INT_MIN = -(2 ** 63)
SQL_INT_MAX = 2 ** 63 - 1


def fits_sql_integer(value: Optional[int]) -> bool:
    """True when `value` can be bound as an integer parameter without overflow."""
    return value is not None and SQL_INT_MIN <= value <= SQL_INT_MAX


class StaleRecordError(RuntimeError):
    """Raised when an update matched no row (deleted or concurrently changed)."""


class BookRepository(Protocol):
    def get_all(self) -> List[Book]: ...

    def get_by_id(self, book_id: int) -> Optional[Book]: ...

    def add(self, book: Book) -> Book: ...

    def update(self, book: Book) -> Book: ...

    def delete(self, book_id: int) -> bool: ...

    def get_filtered(
        self,
        genre: Optional[str] = None,
        year: Optional[int] = None,
        rating: Optional[int] = None,
    ) -> List[Book]: ...

    def exists(self, book_id: int) -> bool: ...

    def exists_with_title_author(self, title: str, author: str) -> bool: ...

    def list_genres(self) -> List[str]: ...


class ReviewRepository(Protocol):
    def get_all(self) -> List[Review]: ...

    def get_by_id(self, review_id: int) -> Optional[Review]: ...

    def add(self, review: Review) -> Review: ...

    def update(self, review: Review) -> Review: ...

    def delete(self, review_id: int) -> bool: ...

    def get_by_book_id(self, book_id: int) -> List[Review]: ...

    def exists(self, review_id: int) -> bool: ...


class ReviewVoteRepository(Protocol):
    def upsert(self, review_id: int, user_id: str, is_upvote: bool) -> ReviewVote: ...

    def get(self, review_id: int, user_id: str) -> Optional[ReviewVote]: ...

    def count_for_review(self, review_id: int) -> Tuple[int, int]: ...


class UserRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[User]: ...

    def add(self, user: User) -> User: ...


__all__ = [
    "SQL_INT_MIN",
    "SQL_INT_MAX",
    "fits_sql_integer",
    "StaleRecordError",
    "BookRepository",
    "ReviewRepository",
    "ReviewVoteRepository",
    "UserRepository",
]
