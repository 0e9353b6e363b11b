"""SQLAlchemy-backed review repository."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import joinedload, selectinload

from bookreviewhub.db import app_session
from bookreviewhub.db.models import Review
from bookreviewhub.db.repositories.interfaces import StaleRecordError, fits_sql_integer

_EDITABLE_COLUMNS = ("content", "rating", "date_created", "book_id", "user_id")


def _with_parents(query):
    return query.options(joinedload(Review.book), selectinload(Review.votes))


class SqlReviewRepository:
    def get_all(self) -> List[Review]:
        with app_session() as session:
            query = _with_parents(session.query(Review))
            return query.order_by(Review.date_created.desc(), Review.id.desc()).all()

    def get_by_id(self, review_id: int) -> Optional[Review]:
        if not fits_sql_integer(review_id):
            return None
        with app_session() as session:
            return _with_parents(session.query(Review)).filter(Review.id == review_id).one_or_none()

    def add(self, review: Review) -> Review:
        with app_session() as session:
            session.add(review)
            session.flush()
            # load parents while attached; callers read them after the session closes
            _ = review.book
            _ = list(review.votes)
        return review

    def update(self, review: Review) -> Review:
        values = {name: getattr(review, name) for name in _EDITABLE_COLUMNS}
        with app_session() as session:
            result = session.execute(
                update(Review).where(Review.id == review.id).values(**values)
            )
            if not result.rowcount:
                raise StaleRecordError(f"review {review.id} was not updated")
        return review

    def delete(self, review_id: int) -> bool:
        if not fits_sql_integer(review_id):
            return False
        with app_session() as session:
            review = session.get(Review, review_id)
            if not review:
                return False
            session.delete(review)
            return True

    def get_by_book_id(self, book_id: int) -> List[Review]:
        if not fits_sql_integer(book_id):
            return []
        with app_session() as session:
            query = _with_parents(session.query(Review)).filter(Review.book_id == book_id)
            return query.order_by(Review.date_created.desc(), Review.id.desc()).all()

    def exists(self, review_id: int) -> bool:
        if not fits_sql_integer(review_id):
            return False
        with app_session() as session:
            return session.query(Review.id).filter(Review.id == review_id).first() is not None


__all__ = ["SqlReviewRepository"]
