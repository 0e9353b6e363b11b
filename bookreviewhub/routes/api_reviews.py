"""JSON API for reviews and review votes."""
from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from bookreviewhub.services import (
    NotFoundError,
    ReviewCreateDto,
    ReviewVoteDto,
    UnauthorizedError,
    ValidationFailedError,
    books_service,
    reviews_service,
)
from bookreviewhub.routes.helpers import json_error, json_payload
from bookreviewhub.services.dtos import json_field_errors
from bookreviewhub.utils.identity import get_current_user_id
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("routes.api_reviews")

bp = Blueprint("api_reviews", __name__, url_prefix="/api/reviews")


@bp.route("/book/<int:book_id>", methods=["GET"])
def reviews_for_book(book_id: int):
    try:
        reviews = reviews_service.reviews_for_book(book_id)
    except NotFoundError:
        return json_error("book_not_found", 404)
    return jsonify([books_service.review_projection(r) for r in reviews])


@bp.route("", methods=["POST"])
def create_review():
    user_id = get_current_user_id()
    if not user_id:
        return json_error("login_required", 401)
    dto = ReviewCreateDto.from_json(json_payload())
    try:
        review = reviews_service.create_review(dto, user_id=user_id)
    except UnauthorizedError:
        return json_error("login_required", 401)
    except ValidationFailedError as exc:
        return json_error("validation_failed", 400, details=json_field_errors(exc.errors))
    except NotFoundError:
        return json_error("book_not_found", 404)
    return jsonify(reviews_service.created_review_payload(review))


@bp.route("/<int:review_id>/vote", methods=["POST"])
def vote_review(review_id: int):
    user_id = get_current_user_id()
    if not user_id:
        return json_error("login_required", 401)
    dto = ReviewVoteDto.from_json(json_payload())
    try:
        reviews_service.vote(review_id, dto, user_id=user_id)
    except UnauthorizedError:
        return json_error("login_required", 401)
    except ValidationFailedError as exc:
        return json_error("validation_failed", 400, details=json_field_errors(exc.errors))
    except NotFoundError:
        return json_error("review_not_found", 404)
    return jsonify({"success": True})


def register_api_reviews(app: Any) -> None:
    if getattr(app, "_bookreviewhub_api_reviews_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_bookreviewhub_api_reviews_bp", bp)
    LOG.debug("api_reviews blueprint registered")


__all__ = ["register_api_reviews", "bp"]
