"""Server-rendered book pages.

Routes:
    /Books                 -> filtered list (?genre=&year=&rating=)
    /Books/Details/<id>    -> single book with its reviews
    /Books/Create          -> create form (signed-in users)
    /Books/Edit/<id>       -> edit form (owner only)
    /Books/Delete/<id>     -> delete confirmation (owner only)
    /Books/Reviews/<id>    -> review page with vote counts and review form
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, abort, redirect, request, url_for

from bookreviewhub.services import (
    BookCreateDto,
    NotFoundError,
    OwnershipError,
    ValidationFailedError,
    books_service,
    reviews_service,
)
from bookreviewhub.routes.helpers import login_redirect, render_page
from bookreviewhub.utils.identity import get_current_user_id
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("routes.books")

bp = Blueprint("books", __name__, url_prefix="/Books")


@bp.route("/Index", methods=["GET"])
@bp.route("", methods=["GET"])
def index():
    genre = (request.args.get("genre") or "").strip() or None
    year = request.args.get("year", type=int)
    rating = request.args.get("rating", type=int)
    books = books_service.list_books(genre=genre, year=year, rating=rating)
    return render_page(
        "books_index.html",
        books=books,
        genres=books_service.list_genres(),
        average_rating=books_service.average_rating,
        filters={"genre": genre or "", "year": year or "", "rating": rating or ""},
    )


@bp.route("/Details/<int:book_id>", methods=["GET"])
def details(book_id: int):
    try:
        book = books_service.get_book(book_id)
    except NotFoundError:
        abort(404)
    return render_page(
        "book_details.html",
        book=book,
        average_rating=books_service.average_rating(book.reviews),
    )


@bp.route("/Reviews/<int:book_id>", methods=["GET"])
def reviews(book_id: int):
    try:
        book = books_service.get_book(book_id)
    except NotFoundError:
        abort(404)
    return render_book_reviews(book)


def render_book_reviews(book: Any, *, form_errors=None, form_values=None, status: int = 200):
    """Render the book review page; also used when a review submission fails."""
    vote_counts = {review.id: reviews_service.tally_votes(review) for review in book.reviews}
    return render_page(
        "book_reviews.html",
        status=status,
        book=book,
        reviews=sorted(book.reviews, key=lambda r: r.date_created, reverse=True),
        vote_counts=vote_counts,
        average_rating=books_service.average_rating(book.reviews),
        form_errors=form_errors or [],
        form_values=form_values or {},
    )


@bp.route("/Create", methods=["GET", "POST"])
def create():
    user_id = get_current_user_id()
    if not user_id:
        return login_redirect()
    if request.method == "GET":
        return render_page("book_form.html", mode="create", form_values={})
    dto = BookCreateDto.from_form(request.form)
    try:
        books_service.create_book(dto, user_id=user_id)
    except ValidationFailedError as exc:
        return render_page(
            "book_form.html",
            mode="create",
            form_values=dto.as_form_values(),
            field_errors=exc.errors,
            form_errors=exc.messages(),
        )
    return redirect(url_for("books.index"))


@bp.route("/Edit/<int:book_id>", methods=["GET", "POST"])
def edit(book_id: int):
    user_id = get_current_user_id()
    if request.method == "GET":
        try:
            book = books_service.get_owned_book(book_id, user_id=user_id)
        except NotFoundError:
            abort(404)
        except OwnershipError:
            abort(401)
        return render_page(
            "book_form.html",
            mode="edit",
            book_id=book.id,
            form_values={
                "title": book.title,
                "author": book.author,
                "published_year": book.published_year,
                "genre": book.genre,
            },
        )
    dto = BookCreateDto.from_form(request.form)
    try:
        books_service.update_book(book_id, dto, user_id=user_id)
    except NotFoundError:
        abort(404)
    except OwnershipError:
        abort(401)
    except ValidationFailedError as exc:
        return render_page(
            "book_form.html",
            mode="edit",
            book_id=book_id,
            form_values=dto.as_form_values(),
            field_errors=exc.errors,
            form_errors=exc.messages(),
        )
    return redirect(url_for("books.index"))


@bp.route("/Delete/<int:book_id>", methods=["GET"])
def delete(book_id: int):
    try:
        book = books_service.get_owned_book(book_id, user_id=get_current_user_id())
    except NotFoundError:
        abort(404)
    except OwnershipError:
        abort(401)
    return render_page("book_delete.html", book=book)


@bp.route("/Delete/<int:book_id>", methods=["POST"])
def delete_confirmed(book_id: int):
    # Non-owners land on the list as well; nothing distinguishes a refused delete.
    books_service.delete_book(book_id, user_id=get_current_user_id())
    return redirect(url_for("books.index"))


def register_books(app: Any) -> None:
    if getattr(app, "_bookreviewhub_books_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_bookreviewhub_books_bp", bp)
    LOG.debug("books blueprint registered")


__all__ = ["register_books", "render_book_reviews", "bp"]
