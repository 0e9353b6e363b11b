"""Review vote persistence with an atomic per-user upsert."""
from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookreviewhub.db import app_session
from bookreviewhub.db.models import ReviewVote
from bookreviewhub.db.repositories.interfaces import fits_sql_integer
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("votes_repo")

_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def _vote_query(session: Session, review_id: int, user_id: str):
    return session.query(ReviewVote).filter(
        ReviewVote.review_id == review_id,
        ReviewVote.user_id == user_id,
    )


def _insert_or_update(session: Session, review_id: int, user_id: str, is_upvote: bool) -> None:
    """Portable path for dialects without ON CONFLICT; the unique constraint arbitrates."""
    try:
        with session.begin_nested():
            session.add(ReviewVote(review_id=review_id, user_id=user_id, is_upvote=is_upvote))
    except IntegrityError:
        LOG.debug("Vote exists review_id=%s user_id=%s; updating", review_id, user_id)
        _vote_query(session, review_id, user_id).update(
            {ReviewVote.is_upvote: is_upvote}, synchronize_session=False
        )


class SqlReviewVoteRepository:
    def upsert(self, review_id: int, user_id: str, is_upvote: bool) -> ReviewVote:
        """Record the user's vote, replacing any previous flag in one statement."""
        with app_session() as session:
            dialect = session.get_bind().dialect.name
            insert_fn = _UPSERT_INSERTS.get(dialect)
            if insert_fn is not None:
                stmt = insert_fn(ReviewVote).values(
                    review_id=review_id,
                    user_id=user_id,
                    is_upvote=is_upvote,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["review_id", "user_id"],
                    set_={"is_upvote": stmt.excluded.is_upvote},
                )
                session.execute(stmt)
            else:
                _insert_or_update(session, review_id, user_id, is_upvote)
            return _vote_query(session, review_id, user_id).populate_existing().one()

    def get(self, review_id: int, user_id: str) -> Optional[ReviewVote]:
        if not fits_sql_integer(review_id):
            return None
        with app_session() as session:
            return _vote_query(session, review_id, user_id).one_or_none()

    def count_for_review(self, review_id: int) -> Tuple[int, int]:
        """Return ``(upvotes, downvotes)`` for a review."""
        if not fits_sql_integer(review_id):
            return 0, 0
        with app_session() as session:
            up, down = (
                session.query(
                    func.coalesce(func.sum(case((ReviewVote.is_upvote.is_(True), 1), else_=0)), 0),
                    func.coalesce(func.sum(case((ReviewVote.is_upvote.is_(False), 1), else_=0)), 0),
                )
                .filter(ReviewVote.review_id == review_id)
                .one()
            )
            return int(up), int(down)


__all__ = ["SqlReviewVoteRepository"]
