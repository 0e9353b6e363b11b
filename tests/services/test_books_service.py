"""Tests for books_service against an in-memory fake repository."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from bookreviewhub.db.models import Book, Review
from bookreviewhub.db.repositories import StaleRecordError
from bookreviewhub.services import (
    BookCreateDto,
    DuplicateBookError,
    NotFoundError,
    OwnershipError,
    UnauthorizedError,
    ValidationFailedError,
    books_service,
)


class FakeBookRepository:
    """Dict-backed stand-in satisfying the BookRepository protocol."""

    def __init__(self):
        self.rows: Dict[int, Book] = {}
        self.updates: List[int] = []
        self._next_id = 1

    def get_all(self):
        return list(self.rows.values())

    def get_by_id(self, book_id):
        return self.rows.get(book_id)

    def add(self, book):
        book.id = self._next_id
        self._next_id += 1
        self.rows[book.id] = book
        return book

    def update(self, book):
        if book.id not in self.rows:
            raise StaleRecordError(str(book.id))
        self.updates.append(book.id)
        return book

    def delete(self, book_id):
        return self.rows.pop(book_id, None) is not None

    def get_filtered(self, genre=None, year=None, rating=None):
        result = []
        for book in self.rows.values():
            if genre and book.genre != genre:
                continue
            if year is not None and book.published_year != year:
                continue
            if rating is not None and not any(r.rating == rating for r in book.reviews):
                continue
            result.append(book)
        return result

    def exists(self, book_id):
        return book_id in self.rows

    def exists_with_title_author(self, title, author):
        return any(b.title == title and b.author == author for b in self.rows.values())

    def list_genres(self):
        return sorted({b.genre for b in self.rows.values()})


@pytest.fixture
def repo() -> FakeBookRepository:
    return FakeBookRepository()


def _dto(**overrides) -> BookCreateDto:
    values = {"title": "Dune", "author": "Frank Herbert", "published_year": 1965, "genre": "SciFi"}
    values.update(overrides)
    return BookCreateDto(**values)


def _seed(repo: FakeBookRepository, owner: str = "owner-1", ratings: Optional[List[int]] = None) -> Book:
    book = Book(title="Dune", author="Frank Herbert", published_year=1965, genre="SciFi", user_id=owner)
    book.reviews = [Review(content="x", rating=r, user_id="r") for r in (ratings or [])]
    return repo.add(book)


def test_average_rating_is_zero_without_reviews():
    assert books_service.average_rating([]) == 0.0


def test_average_rating_is_arithmetic_mean():
    reviews = [Review(rating=5), Review(rating=3)]

    assert books_service.average_rating(reviews) == 4.0


def test_book_summary_carries_average(repo):
    book = _seed(repo, ratings=[5, 4])

    summary = books_service.book_summary(book)

    assert summary == {
        "id": book.id,
        "title": "Dune",
        "author": "Frank Herbert",
        "publishedYear": 1965,
        "genre": "SciFi",
        "averageRating": 4.5,
    }


def test_list_books_passes_filters_through(repo):
    _seed(repo, ratings=[5])
    other = Book(title="Emma", author="Austen", published_year=1815, genre="Novel", user_id="o")
    other.reviews = []
    repo.add(other)

    assert [b.title for b in books_service.list_books(genre="Novel", books=repo)] == ["Emma"]
    assert [b.title for b in books_service.list_books(rating=5, books=repo)] == ["Dune"]
    assert len(books_service.list_books(books=repo)) == 2


def test_get_book_missing_raises_not_found(repo):
    with pytest.raises(NotFoundError) as excinfo:
        books_service.get_book(42, books=repo)

    assert str(excinfo.value) == "book_not_found"


def test_create_requires_identity(repo):
    with pytest.raises(UnauthorizedError):
        books_service.create_book(_dto(), user_id=None, books=repo)

    assert repo.rows == {}


def test_create_stamps_caller_as_owner(repo):
    book = books_service.create_book(_dto(), user_id="owner-1", books=repo)

    assert book.id == 1
    assert book.user_id == "owner-1"
    assert books_service.created_book_payload(book)["userId"] == "owner-1"


def test_create_reports_every_missing_field(repo):
    with pytest.raises(ValidationFailedError) as excinfo:
        books_service.create_book(BookCreateDto(), user_id="owner-1", books=repo)

    assert set(excinfo.value.errors) == {"title", "author", "published_year", "genre"}
    assert "Title is required." in excinfo.value.messages()
    assert repo.rows == {}


def test_duplicates_rejected_only_when_asked(repo):
    books_service.create_book(_dto(), user_id="owner-1", books=repo)

    books_service.create_book(_dto(), user_id="owner-2", books=repo)
    with pytest.raises(DuplicateBookError):
        books_service.create_book(_dto(), user_id="owner-3", reject_duplicates=True, books=repo)

    assert len(repo.rows) == 2


def test_update_by_owner_applies_fields_and_keeps_owner(repo):
    book = _seed(repo)

    updated = books_service.update_book(book.id, _dto(title="Dune Messiah", id=book.id), user_id="owner-1", books=repo)

    assert updated.title == "Dune Messiah"
    assert updated.user_id == "owner-1"
    assert repo.updates == [book.id]


def test_update_by_non_owner_is_refused_without_mutation(repo):
    book = _seed(repo)

    with pytest.raises(OwnershipError) as excinfo:
        books_service.update_book(book.id, _dto(title="Hijacked"), user_id="intruder", books=repo)

    assert excinfo.value.owner_id == "owner-1"
    assert repo.rows[book.id].title == "Dune"
    assert repo.updates == []


def test_update_with_mismatched_id_is_not_found(repo):
    book = _seed(repo)

    with pytest.raises(NotFoundError) as excinfo:
        books_service.update_book(book.id, _dto(id=book.id + 1), user_id="owner-1", books=repo)

    assert str(excinfo.value) == "id_mismatch"


def test_update_of_missing_book_is_not_found(repo):
    with pytest.raises(NotFoundError):
        books_service.update_book(7, _dto(), user_id="owner-1", books=repo)


def test_update_validates_after_ownership(repo):
    book = _seed(repo)

    with pytest.raises(ValidationFailedError):
        books_service.update_book(book.id, _dto(genre=""), user_id="owner-1", books=repo)

    assert repo.rows[book.id].genre == "SciFi"


def test_get_owned_book_rejects_anonymous(repo):
    book = _seed(repo)

    with pytest.raises(OwnershipError):
        books_service.get_owned_book(book.id, user_id=None, books=repo)
    assert books_service.get_owned_book(book.id, user_id="owner-1", books=repo) is book


def test_delete_by_owner_removes_book(repo):
    book = _seed(repo)

    assert books_service.delete_book(book.id, user_id="owner-1", books=repo) is True
    assert repo.rows == {}


def test_delete_by_non_owner_is_silent_noop(repo):
    book = _seed(repo)

    assert books_service.delete_book(book.id, user_id="intruder", books=repo) is False
    assert books_service.delete_book(999, user_id="owner-1", books=repo) is False
    assert book.id in repo.rows


@pytest.mark.parametrize("year, ok", [(0, False), (1, True), (9999, True), (10000, False), (10 ** 20, False)])
def test_published_year_bounds(year, ok):
    errors = _dto(published_year=year).validate()

    assert ("published_year" not in errors) is ok


def test_format_timestamp_marks_naive_values_as_utc():
    naive = datetime(2024, 5, 1, 12, 30, 0)
    shifted = datetime(2024, 5, 1, 15, 30, 0, tzinfo=timezone(timedelta(hours=3)))

    assert books_service.format_timestamp(naive) == "2024-05-01T12:30:00+00:00"
    assert books_service.format_timestamp(shifted) == "2024-05-01T12:30:00+00:00"
    assert books_service.format_timestamp(None) is None


def test_review_projection_uses_utc_offset():
    review = Review(id=3, content="x", rating=4, user_id="r", date_created=datetime(2024, 1, 2, 3, 4, 5))

    assert books_service.review_projection(review)["dateCreated"] == "2024-01-02T03:04:05+00:00"
