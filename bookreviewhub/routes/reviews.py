"""Server-rendered review pages and the review vote form endpoint.

Only the author of a review may edit or delete it.
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, abort, redirect, request, url_for

from bookreviewhub.services import (
    NotFoundError,
    OwnershipError,
    ReviewCreateDto,
    ReviewEditDto,
    ReviewVoteDto,
    UnauthorizedError,
    ValidationFailedError,
    books_service,
    reviews_service,
)
from bookreviewhub.routes.books import render_book_reviews
from bookreviewhub.routes.helpers import render_page
from bookreviewhub.utils.identity import get_current_user_id
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("routes.reviews")

bp = Blueprint("reviews", __name__, url_prefix="/Reviews")


@bp.route("/Index", methods=["GET"])
@bp.route("", methods=["GET"])
def index():
    return render_page("reviews_index.html", reviews=reviews_service.list_reviews())


@bp.route("/Details/<int:review_id>", methods=["GET"])
def details(review_id: int):
    try:
        review = reviews_service.get_review(review_id)
    except NotFoundError:
        abort(404)
    return render_page(
        "review_details.html",
        review=review,
        vote_counts=reviews_service.tally_votes(review),
    )


@bp.route("/Create", methods=["POST"])
def create():
    dto = ReviewCreateDto.from_form(request.form)
    try:
        reviews_service.create_review(dto, user_id=get_current_user_id())
    except UnauthorizedError:
        abort(401)
    except NotFoundError:
        abort(404)
    except ValidationFailedError as exc:
        if dto.book_id is None:
            abort(404)
        try:
            book = books_service.get_book(dto.book_id)
        except NotFoundError:
            abort(404)
        return render_book_reviews(
            book,
            form_errors=exc.messages(),
            form_values={"content": dto.content, "rating": dto.rating or ""},
        )
    return redirect(url_for("books.reviews", book_id=dto.book_id))


@bp.route("/Edit/<int:review_id>", methods=["GET", "POST"])
def edit(review_id: int):
    user_id = get_current_user_id()
    if request.method == "GET":
        try:
            review = reviews_service.get_owned_review(review_id, user_id=user_id)
        except NotFoundError:
            abort(404)
        except OwnershipError:
            abort(401)
        return render_page(
            "review_edit.html",
            review=review,
            form_values={"content": review.content, "rating": review.rating},
        )
    dto = ReviewEditDto.from_form(request.form)
    try:
        reviews_service.update_review(review_id, dto, user_id=user_id)
    except NotFoundError:
        abort(404)
    except OwnershipError:
        abort(401)
    except ValidationFailedError as exc:
        review = reviews_service.get_review(review_id)
        return render_page(
            "review_edit.html",
            review=review,
            form_values={"content": dto.content, "rating": dto.rating or ""},
            form_errors=exc.messages(),
        )
    return redirect(url_for("reviews.index"))


@bp.route("/Delete/<int:review_id>", methods=["GET"])
def delete(review_id: int):
    try:
        review = reviews_service.get_owned_review(review_id, user_id=get_current_user_id())
    except NotFoundError:
        abort(404)
    except OwnershipError:
        abort(401)
    return render_page("review_delete.html", review=review)


@bp.route("/Delete/<int:review_id>", methods=["POST"])
def delete_confirmed(review_id: int):
    try:
        reviews_service.delete_review(review_id, user_id=get_current_user_id())
    except NotFoundError:
        abort(404)
    except OwnershipError:
        abort(401)
    return redirect(url_for("reviews.index"))


@bp.route("/Vote", methods=["POST"])
def vote():
    review_id = request.form.get("review_id", type=int)
    if review_id is None:
        abort(404)
    dto = ReviewVoteDto.from_form(request.form)
    try:
        reviews_service.vote(review_id, dto, user_id=get_current_user_id())
    except UnauthorizedError:
        abort(401)
    except NotFoundError:
        abort(404)
    except ValidationFailedError:
        abort(400)
    review = reviews_service.get_review(review_id)
    return redirect(url_for("books.reviews", book_id=review.book_id))


def register_reviews(app: Any) -> None:
    if getattr(app, "_bookreviewhub_reviews_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_bookreviewhub_reviews_bp", bp)
    LOG.debug("reviews blueprint registered")


__all__ = ["register_reviews", "bp"]
