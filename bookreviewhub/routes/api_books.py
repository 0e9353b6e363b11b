"""JSON API for books.

Routes:
    GET  /api/books?genre=&year=&rating=  -> book summaries with averageRating
    GET  /api/books/<id>                  -> book with nested reviews
    POST /api/books                       -> create (signed-in callers)
    GET  /api/books/<id>/reviews          -> reviews of one book
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request, url_for

from bookreviewhub.services import (
    BookCreateDto,
    DuplicateBookError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailedError,
    books_service,
)
from bookreviewhub.routes.helpers import json_error, json_payload
from bookreviewhub.services.dtos import json_field_errors
from bookreviewhub.utils.identity import get_current_user_id
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("routes.api_books")

bp = Blueprint("api_books", __name__, url_prefix="/api/books")


@bp.route("", methods=["GET"])
def list_books():
    genre = (request.args.get("genre") or "").strip() or None
    year = request.args.get("year", type=int)
    rating = request.args.get("rating", type=int)
    books = books_service.list_books(genre=genre, year=year, rating=rating)
    return jsonify([books_service.book_summary(b) for b in books])


@bp.route("/<int:book_id>", methods=["GET"])
def get_book(book_id: int):
    try:
        book = books_service.get_book(book_id)
    except NotFoundError:
        return json_error("book_not_found", 404)
    return jsonify(books_service.book_detail(book))


@bp.route("", methods=["POST"])
def create_book():
    user_id = get_current_user_id()
    if not user_id:
        return json_error("login_required", 401)
    dto = BookCreateDto.from_json(json_payload())
    try:
        book = books_service.create_book(dto, user_id=user_id, reject_duplicates=True)
    except UnauthorizedError:
        return json_error("login_required", 401)
    except ValidationFailedError as exc:
        return json_error("validation_failed", 400, details=json_field_errors(exc.errors))
    except DuplicateBookError:
        return json_error("duplicate_book", 400)
    response = jsonify(books_service.created_book_payload(book))
    response.status_code = 201
    response.headers["Location"] = url_for("api_books.get_book", book_id=book.id)
    return response


@bp.route("/<int:book_id>/reviews", methods=["GET"])
def get_book_reviews(book_id: int):
    try:
        book = books_service.get_book(book_id)
    except NotFoundError:
        return json_error("book_not_found", 404)
    return jsonify([books_service.review_projection(r) for r in book.reviews])


def register_api_books(app: Any) -> None:
    if getattr(app, "_bookreviewhub_api_books_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_bookreviewhub_api_books_bp", bp)
    LOG.debug("api_books blueprint registered")


__all__ = ["register_api_books", "bp"]
