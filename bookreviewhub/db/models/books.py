"""ORM models for books, reviews, review votes and site users."""
from __future__ import annotations

import datetime
import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """Site account; `id` is the identity stamped on books, reviews and votes."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=_new_user_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} email={self.email}>"


class Book(Base):
    """A catalog entry owned by the user who created it.

    Reviews are removed by the database (ON DELETE CASCADE) when a book row
    is deleted; the ORM never nulls out `reviews.book_id`.
    """

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    author = Column(String(255), nullable=False)
    published_year = Column(Integer, nullable=False)
    genre = Column(String(100), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)

    reviews = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_books_title_author", "title", "author"),
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Book id={self.id} title={self.title!r} author={self.author!r}>"


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    date_created = Column(DateTime, default=_utcnow, nullable=False)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)

    book = relationship("Book", back_populates="reviews")
    votes = relationship(
        "ReviewVote",
        back_populates="review",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Review id={self.id} book_id={self.book_id} rating={self.rating}>"


class ReviewVote(Base):
    """One up/down vote per (review, user); the unique constraint backs the upsert."""

    __tablename__ = "review_votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    is_upvote = Column(Boolean, nullable=False)

    review = relationship("Review", back_populates="votes")

    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_review_votes_review_user"),
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            "<ReviewVote id={0} review_id={1} user_id={2} is_upvote={3}>".format(
                self.id,
                self.review_id,
                self.user_id,
                self.is_upvote,
            )
        )


__all__ = ["Base", "User", "Book", "Review", "ReviewVote"]
