"""Review orchestration: authoring rules and the per-user vote upsert."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bookreviewhub.db.models import Review, ReviewVote
from bookreviewhub.db.repositories import (
    BookRepository,
    ReviewRepository,
    ReviewVoteRepository,
    SqlBookRepository,
    SqlReviewRepository,
    SqlReviewVoteRepository,
    StaleRecordError,
)
from bookreviewhub.services.books_service import format_timestamp
from bookreviewhub.services.dtos import ReviewCreateDto, ReviewEditDto, ReviewVoteDto
from bookreviewhub.services.errors import (
    NotFoundError,
    OwnershipError,
    UnauthorizedError,
    ValidationFailedError,
)
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("reviews_service")

_default_reviews: ReviewRepository = SqlReviewRepository()
_default_books: BookRepository = SqlBookRepository()
_default_votes: ReviewVoteRepository = SqlReviewVoteRepository()


def _reviews(repo: Optional[ReviewRepository]) -> ReviewRepository:
    return repo if repo is not None else _default_reviews


def _books(repo: Optional[BookRepository]) -> BookRepository:
    return repo if repo is not None else _default_books


def _votes(repo: Optional[ReviewVoteRepository]) -> ReviewVoteRepository:
    return repo if repo is not None else _default_votes


def tally_votes(review: Review) -> Tuple[int, int]:
    """Return ``(upvotes, downvotes)`` from the review's loaded votes."""
    up = sum(1 for vote in review.votes if vote.is_upvote)
    return up, len(review.votes) - up


def created_review_payload(review: Review) -> Dict[str, Any]:
    return {
        "id": review.id,
        "content": review.content,
        "rating": review.rating,
        "dateCreated": format_timestamp(review.date_created),
        "bookId": review.book_id,
        "userId": review.user_id,
    }


def list_reviews(*, reviews: Optional[ReviewRepository] = None) -> List[Review]:
    return _reviews(reviews).get_all()


def get_review(review_id: Optional[int], *, reviews: Optional[ReviewRepository] = None) -> Review:
    if review_id is None:
        raise NotFoundError("review_not_found")
    review = _reviews(reviews).get_by_id(review_id)
    if not review:
        raise NotFoundError("review_not_found")
    return review


def reviews_for_book(
    book_id: int,
    *,
    reviews: Optional[ReviewRepository] = None,
    books: Optional[BookRepository] = None,
) -> List[Review]:
    if not _books(books).exists(book_id):
        raise NotFoundError("book_not_found")
    return _reviews(reviews).get_by_book_id(book_id)


def _ensure_author(review: Review, user_id: Optional[str]) -> None:
    if not user_id or review.user_id != user_id:
        LOG.warning(
            "Refused change to review_id=%s by user_id=%s (author=%s)",
            review.id,
            user_id,
            review.user_id,
        )
        raise OwnershipError("not_owner", owner_id=review.user_id)


def get_owned_review(
    review_id: Optional[int],
    *,
    user_id: Optional[str],
    reviews: Optional[ReviewRepository] = None,
) -> Review:
    review = get_review(review_id, reviews=reviews)
    _ensure_author(review, user_id)
    return review


def create_review(
    dto: ReviewCreateDto,
    *,
    user_id: Optional[str],
    reviews: Optional[ReviewRepository] = None,
    books: Optional[BookRepository] = None,
) -> Review:
    if not user_id:
        raise UnauthorizedError("login_required")
    errors = dto.validate()
    if errors:
        raise ValidationFailedError(errors)
    if not _books(books).exists(dto.book_id):  # type: ignore[arg-type]
        raise NotFoundError("book_not_found")
    review = Review(
        content=dto.content,
        rating=dto.rating,
        book_id=dto.book_id,
        user_id=user_id,
        date_created=datetime.now(timezone.utc),
        votes=[],
    )
    _reviews(reviews).add(review)
    LOG.info("Created review id=%s book_id=%s user_id=%s", review.id, review.book_id, user_id)
    return review


def update_review(
    review_id: int,
    dto: ReviewEditDto,
    *,
    user_id: Optional[str],
    reviews: Optional[ReviewRepository] = None,
) -> Review:
    """Edit content/rating; author, book and creation time stay as stored."""
    if dto.id is not None and dto.id != review_id:
        raise NotFoundError("id_mismatch")
    repo = _reviews(reviews)
    review = get_review(review_id, reviews=repo)
    _ensure_author(review, user_id)
    errors = dto.validate()
    if errors:
        raise ValidationFailedError(errors)
    review.content = dto.content
    review.rating = dto.rating
    try:
        repo.update(review)
    except StaleRecordError as exc:
        if not repo.exists(review_id):
            raise NotFoundError("review_not_found") from exc
        raise
    LOG.info("Updated review id=%s user_id=%s", review_id, user_id)
    return review


def delete_review(
    review_id: int,
    *,
    user_id: Optional[str],
    reviews: Optional[ReviewRepository] = None,
) -> Review:
    repo = _reviews(reviews)
    review = get_owned_review(review_id, user_id=user_id, reviews=repo)
    repo.delete(review_id)
    LOG.info("Deleted review id=%s user_id=%s", review_id, user_id)
    return review


def vote(
    review_id: int,
    dto: ReviewVoteDto,
    *,
    user_id: Optional[str],
    reviews: Optional[ReviewRepository] = None,
    votes: Optional[ReviewVoteRepository] = None,
) -> ReviewVote:
    """Record the caller's up/down vote; a repeated vote replaces the flag."""
    if not user_id:
        raise UnauthorizedError("login_required")
    errors = dto.validate()
    if errors:
        raise ValidationFailedError(errors)
    if not _reviews(reviews).exists(review_id):
        raise NotFoundError("review_not_found")
    record = _votes(votes).upsert(review_id, user_id, bool(dto.is_upvote))
    LOG.info("Recorded vote review_id=%s user_id=%s upvote=%s", review_id, user_id, record.is_upvote)
    return record


__all__ = [
    "tally_votes",
    "created_review_payload",
    "list_reviews",
    "get_review",
    "reviews_for_book",
    "get_owned_review",
    "create_review",
    "update_review",
    "delete_review",
    "vote",
]
