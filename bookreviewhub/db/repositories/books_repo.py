"""SQLAlchemy-backed book repository."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import selectinload

from bookreviewhub.db import app_session
from bookreviewhub.db.models import Book, Review
from bookreviewhub.db.repositories.interfaces import StaleRecordError, fits_sql_integer

_EDITABLE_COLUMNS = ("title", "author", "published_year", "genre", "user_id")


class SqlBookRepository:
    """Book persistence; every read eager-loads the book's reviews."""

    def get_all(self) -> List[Book]:
        with app_session() as session:
            return (
                session.query(Book)
                .options(selectinload(Book.reviews))
                .order_by(Book.id)
                .all()
            )

    def get_by_id(self, book_id: int) -> Optional[Book]:
        if not fits_sql_integer(book_id):
            return None
        with app_session() as session:
            return (
                session.query(Book)
                .options(selectinload(Book.reviews).selectinload(Review.votes))
                .filter(Book.id == book_id)
                .one_or_none()
            )

    def add(self, book: Book) -> Book:
        with app_session() as session:
            session.add(book)
            session.flush()
            # load while attached; callers read it after the session closes
            _ = list(book.reviews)
        return book

    def update(self, book: Book) -> Book:
        values = {name: getattr(book, name) for name in _EDITABLE_COLUMNS}
        with app_session() as session:
            result = session.execute(
                update(Book).where(Book.id == book.id).values(**values)
            )
            if not result.rowcount:
                raise StaleRecordError(f"book {book.id} was not updated")
        return book

    def delete(self, book_id: int) -> bool:
        if not fits_sql_integer(book_id):
            return False
        with app_session() as session:
            book = session.get(Book, book_id)
            if not book:
                return False
            session.delete(book)
            return True

    def get_filtered(
        self,
        genre: Optional[str] = None,
        year: Optional[int] = None,
        rating: Optional[int] = None,
    ) -> List[Book]:
        """Books matching every supplied predicate; `None`/empty ones are ignored.

        `rating` matches books with at least one review of exactly that rating,
        not the average.
        """
        for value in (year, rating):
            if value is not None and not fits_sql_integer(value):
                return []
        with app_session() as session:
            query = session.query(Book).options(selectinload(Book.reviews))
            if genre:
                query = query.filter(Book.genre == genre)
            if year is not None:
                query = query.filter(Book.published_year == year)
            if rating is not None:
                query = query.filter(Book.reviews.any(Review.rating == rating))
            return query.order_by(Book.id).all()

    def exists(self, book_id: int) -> bool:
        if not fits_sql_integer(book_id):
            return False
        with app_session() as session:
            return session.query(Book.id).filter(Book.id == book_id).first() is not None

    def exists_with_title_author(self, title: str, author: str) -> bool:
        with app_session() as session:
            return (
                session.query(Book.id)
                .filter(Book.title == title, Book.author == author)
                .first()
                is not None
            )

    def list_genres(self) -> List[str]:
        with app_session() as session:
            rows = session.query(Book.genre).distinct().order_by(Book.genre).all()
            return [row[0] for row in rows if row[0]]


__all__ = ["SqlBookRepository"]
