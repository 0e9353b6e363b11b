"""Sample catalog seeding.

Inserts two books with one review each, but only while the books table is
empty, so running it repeatedly is harmless.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from bookreviewhub.db.models import Book, Review
from bookreviewhub.db.repositories import (
    BookRepository,
    ReviewRepository,
    SqlBookRepository,
    SqlReviewRepository,
)
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("seed")

SEED_USER_ID = "seed-user"
SAMPLE_BOOKS = (
    {
        "title": "The Name of the Rose",
        "author": "Umberto Eco",
        "published_year": 1980,
        "genre": "Novel",
        "review": ("Excellent Book!", 5),
    },
    {
        "title": "The Little Prince",
        "author": "Antoine de Saint-Exupéry",
        "published_year": 1943,
        "genre": "Children",
        "review": ("Very touching and timeless.", 4),
    },
)


def seed_if_empty(
    *,
    books: Optional[BookRepository] = None,
    reviews: Optional[ReviewRepository] = None,
) -> Dict[str, int]:
    books = books if books is not None else SqlBookRepository()
    reviews = reviews if reviews is not None else SqlReviewRepository()
    if books.get_all():
        LOG.info("Seed skipped; books already present")
        return {"books": 0, "reviews": 0}
    created = {"books": 0, "reviews": 0}
    for sample in SAMPLE_BOOKS:
        book = Book(
            title=sample["title"],
            author=sample["author"],
            published_year=sample["published_year"],
            genre=sample["genre"],
            user_id=SEED_USER_ID,
            reviews=[],
        )
        books.add(book)
        created["books"] += 1
        content, rating = sample["review"]
        reviews.add(
            Review(
                content=content,
                rating=rating,
                book_id=book.id,
                user_id=SEED_USER_ID,
                date_created=datetime.now(timezone.utc),
                votes=[],
            )
        )
        created["reviews"] += 1
    LOG.info("Seeded %s books and %s reviews", created["books"], created["reviews"])
    return created


__all__ = ["SEED_USER_ID", "SAMPLE_BOOKS", "seed_if_empty"]
