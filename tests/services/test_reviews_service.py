"""Tests for reviews_service backed by in-memory SQLite."""
from __future__ import annotations

import pytest

from bookreviewhub.db.engine import init_engine_once, reset_for_tests
from bookreviewhub.db.models import Book
from bookreviewhub.db.repositories import SqlBookRepository, SqlReviewVoteRepository
from bookreviewhub.services import (
    NotFoundError,
    OwnershipError,
    ReviewCreateDto,
    ReviewEditDto,
    ReviewVoteDto,
    UnauthorizedError,
    ValidationFailedError,
    reviews_service,
)


@pytest.fixture(autouse=True)
def in_memory_db(monkeypatch):
    reset_for_tests(drop=True)
    monkeypatch.delenv("BOOKREVIEWHUB_DATABASE_URL", raising=False)
    monkeypatch.setenv("BOOKREVIEWHUB_DB_PATH", ":memory:")
    init_engine_once()
    yield
    reset_for_tests(drop=True)


@pytest.fixture
def book_id() -> int:
    book = SqlBookRepository().add(
        Book(title="Emma", author="Jane Austen", published_year=1815, genre="Novel", user_id="owner-1")
    )
    return book.id


def _create(book_id: int, rating: int = 4, user_id: str = "author-1"):
    return reviews_service.create_review(
        ReviewCreateDto(content="Witty", rating=rating, book_id=book_id),
        user_id=user_id,
    )


@pytest.mark.parametrize("rating", [0, 6, None])
def test_create_rejects_out_of_range_rating(book_id, rating):
    with pytest.raises(ValidationFailedError) as excinfo:
        _create(book_id, rating=rating)

    assert excinfo.value.errors == {"rating": "Rating must be between 1 and 5."}
    assert reviews_service.list_reviews() == []


@pytest.mark.parametrize("rating", [1, 5])
def test_create_accepts_boundary_ratings(book_id, rating):
    review = _create(book_id, rating=rating)

    assert review.rating == rating
    assert review.user_id == "author-1"
    assert review.date_created is not None


def test_create_requires_identity(book_id):
    with pytest.raises(UnauthorizedError):
        _create(book_id, user_id="")


def test_create_for_unknown_book_is_not_found(book_id):
    with pytest.raises(NotFoundError) as excinfo:
        _create(book_id + 50)

    assert str(excinfo.value) == "book_not_found"


def test_create_requires_book_and_content():
    with pytest.raises(ValidationFailedError) as excinfo:
        reviews_service.create_review(ReviewCreateDto(rating=3), user_id="author-1")

    assert set(excinfo.value.errors) == {"content", "book_id"}


def test_created_payload_shape(book_id):
    review = _create(book_id)

    payload = reviews_service.created_review_payload(review)

    assert payload["bookId"] == book_id
    assert payload["userId"] == "author-1"
    assert payload["rating"] == 4
    assert payload["dateCreated"]


def test_reviews_for_book_and_missing_book(book_id):
    _create(book_id)

    assert len(reviews_service.reviews_for_book(book_id)) == 1
    with pytest.raises(NotFoundError):
        reviews_service.reviews_for_book(book_id + 1)


def test_update_by_author_keeps_book_and_date(book_id):
    review = _create(book_id)

    updated = reviews_service.update_review(
        review.id, ReviewEditDto(content="Changed", rating=2, id=review.id), user_id="author-1"
    )

    stored = reviews_service.get_review(review.id)
    assert updated.content == "Changed"
    assert stored.rating == 2
    assert stored.book_id == book_id
    assert stored.user_id == "author-1"


def test_update_by_other_user_is_refused(book_id):
    review = _create(book_id)

    with pytest.raises(OwnershipError):
        reviews_service.update_review(review.id, ReviewEditDto(content="Hacked", rating=1), user_id="intruder")

    assert reviews_service.get_review(review.id).content == "Witty"


def test_update_validates_rating(book_id):
    review = _create(book_id)

    with pytest.raises(ValidationFailedError):
        reviews_service.update_review(review.id, ReviewEditDto(content="ok", rating=9), user_id="author-1")


def test_delete_is_author_only(book_id):
    review = _create(book_id)

    with pytest.raises(OwnershipError):
        reviews_service.delete_review(review.id, user_id="intruder")
    reviews_service.delete_review(review.id, user_id="author-1")

    with pytest.raises(NotFoundError):
        reviews_service.get_review(review.id)


def test_vote_twice_keeps_latest_flag(book_id):
    review = _create(book_id)

    reviews_service.vote(review.id, ReviewVoteDto(is_upvote=True), user_id="voter-1")
    record = reviews_service.vote(review.id, ReviewVoteDto(is_upvote=False), user_id="voter-1")

    assert record.is_upvote is False
    assert SqlReviewVoteRepository().count_for_review(review.id) == (0, 1)
    assert reviews_service.tally_votes(reviews_service.get_review(review.id)) == (0, 1)


def test_vote_rules(book_id):
    review = _create(book_id)

    with pytest.raises(UnauthorizedError):
        reviews_service.vote(review.id, ReviewVoteDto(is_upvote=True), user_id=None)
    with pytest.raises(ValidationFailedError):
        reviews_service.vote(review.id, ReviewVoteDto(), user_id="voter-1")
    with pytest.raises(NotFoundError):
        reviews_service.vote(review.id + 10, ReviewVoteDto(is_upvote=True), user_id="voter-1")


def test_vote_dto_from_json_requires_real_boolean():
    assert ReviewVoteDto.from_json({"isUpvote": "true"}).is_upvote is None
    assert ReviewVoteDto.from_json({"isUpvote": True}).is_upvote is True
    assert ReviewVoteDto.from_form({"is_upvote": "false"}).is_upvote is False


def test_oversized_ids_map_to_not_found(book_id):
    huge = 10 ** 20

    with pytest.raises(NotFoundError):
        reviews_service.get_review(huge)
    with pytest.raises(NotFoundError):
        reviews_service.reviews_for_book(huge)
    with pytest.raises(NotFoundError):
        reviews_service.create_review(
            ReviewCreateDto(content="Witty", rating=4, book_id=huge), user_id="author-1"
        )
    with pytest.raises(NotFoundError):
        reviews_service.vote(huge, ReviewVoteDto(is_upvote=True), user_id="voter-1")
