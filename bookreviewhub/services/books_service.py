"""Book catalog orchestration: filtering, ownership rules and API projections."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bookreviewhub.db.models import Book, Review
from bookreviewhub.db.repositories import BookRepository, SqlBookRepository, StaleRecordError
from bookreviewhub.services.dtos import BookCreateDto
from bookreviewhub.services.errors import (
    DuplicateBookError,
    NotFoundError,
    OwnershipError,
    UnauthorizedError,
    ValidationFailedError,
)
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("books_service")

_default_books: BookRepository = SqlBookRepository()


def _repo(books: Optional[BookRepository]) -> BookRepository:
    return books if books is not None else _default_books


def average_rating(reviews: Iterable[Review]) -> float:
    """Arithmetic mean of the review ratings, 0 when there are none."""
    ratings = [review.rating for review in reviews]
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 in UTC with an explicit offset; the database hands back naive UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def review_projection(review: Review) -> Dict[str, Any]:
    return {
        "id": review.id,
        "content": review.content,
        "rating": review.rating,
        "dateCreated": format_timestamp(review.date_created),
        "userId": review.user_id,
    }


def book_summary(book: Book) -> Dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "publishedYear": book.published_year,
        "genre": book.genre,
        "averageRating": average_rating(book.reviews),
    }


def book_detail(book: Book) -> Dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "publishedYear": book.published_year,
        "genre": book.genre,
        "reviews": [review_projection(r) for r in book.reviews],
    }


def created_book_payload(book: Book) -> Dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "publishedYear": book.published_year,
        "genre": book.genre,
        "userId": book.user_id,
    }


def list_books(
    genre: Optional[str] = None,
    year: Optional[int] = None,
    rating: Optional[int] = None,
    *,
    books: Optional[BookRepository] = None,
) -> List[Book]:
    return _repo(books).get_filtered(genre=genre, year=year, rating=rating)


def list_genres(*, books: Optional[BookRepository] = None) -> List[str]:
    return _repo(books).list_genres()


def get_book(book_id: Optional[int], *, books: Optional[BookRepository] = None) -> Book:
    if book_id is None:
        raise NotFoundError("book_not_found")
    book = _repo(books).get_by_id(book_id)
    if not book:
        raise NotFoundError("book_not_found")
    return book


def _ensure_owner(book: Book, user_id: Optional[str]) -> None:
    if not user_id or book.user_id != user_id:
        LOG.warning("Refused change to book_id=%s by user_id=%s (owner=%s)", book.id, user_id, book.user_id)
        raise OwnershipError("not_owner", owner_id=book.user_id)


def get_owned_book(
    book_id: Optional[int],
    *,
    user_id: Optional[str],
    books: Optional[BookRepository] = None,
) -> Book:
    """Fetch a book for its edit/delete page; only the owner may open those."""
    book = get_book(book_id, books=books)
    _ensure_owner(book, user_id)
    return book


def create_book(
    dto: BookCreateDto,
    *,
    user_id: Optional[str],
    reject_duplicates: bool = False,
    books: Optional[BookRepository] = None,
) -> Book:
    if not user_id:
        raise UnauthorizedError("login_required")
    errors = dto.validate()
    if errors:
        raise ValidationFailedError(errors)
    repo = _repo(books)
    if reject_duplicates and repo.exists_with_title_author(dto.title, dto.author):
        raise DuplicateBookError("duplicate_book")
    book = Book(
        title=dto.title,
        author=dto.author,
        published_year=dto.published_year,
        genre=dto.genre,
        user_id=user_id,
        reviews=[],
    )
    repo.add(book)
    LOG.info("Created book id=%s title=%s user_id=%s", book.id, book.title, user_id)
    return book


def update_book(
    book_id: int,
    dto: BookCreateDto,
    *,
    user_id: Optional[str],
    books: Optional[BookRepository] = None,
) -> Book:
    """Apply an owner's edit; the owner field itself is never taken from input."""
    if dto.id is not None and dto.id != book_id:
        raise NotFoundError("id_mismatch")
    repo = _repo(books)
    book = get_book(book_id, books=repo)
    _ensure_owner(book, user_id)
    errors = dto.validate()
    if errors:
        raise ValidationFailedError(errors)
    book.title = dto.title
    book.author = dto.author
    book.published_year = dto.published_year
    book.genre = dto.genre
    try:
        repo.update(book)
    except StaleRecordError as exc:
        if not repo.exists(book_id):
            raise NotFoundError("book_not_found") from exc
        raise
    LOG.info("Updated book id=%s user_id=%s", book_id, user_id)
    return book


def delete_book(
    book_id: int,
    *,
    user_id: Optional[str],
    books: Optional[BookRepository] = None,
) -> bool:
    """Delete when the caller owns the book; any other case is a logged no-op."""
    repo = _repo(books)
    book = repo.get_by_id(book_id)
    if not book:
        LOG.info("Delete skipped; book_id=%s not found", book_id)
        return False
    if not user_id or book.user_id != user_id:
        LOG.warning("Delete refused for book_id=%s user_id=%s", book_id, user_id)
        return False
    deleted = repo.delete(book_id)
    LOG.info("Deleted book id=%s user_id=%s", book_id, user_id)
    return deleted


__all__ = [
    "average_rating",
    "format_timestamp",
    "review_projection",
    "book_summary",
    "book_detail",
    "created_book_payload",
    "list_books",
    "list_genres",
    "get_book",
    "get_owned_book",
    "create_book",
    "update_book",
    "delete_book",
]
