"""Tests for the server-rendered review pages and the vote form."""
from __future__ import annotations

import pytest

from bookreviewhub.db.engine import init_engine_once, reset_for_tests
from bookreviewhub.db.models import Book, Review
from bookreviewhub.db.repositories import (
    SqlBookRepository,
    SqlReviewRepository,
    SqlReviewVoteRepository,
)
from bookreviewhub.startup.wiring import create_app


@pytest.fixture(autouse=True)
def in_memory_db(monkeypatch):
    reset_for_tests(drop=True)
    monkeypatch.delenv("BOOKREVIEWHUB_DATABASE_URL", raising=False)
    monkeypatch.delenv("BOOKREVIEWHUB_SEED_ON_START", raising=False)
    monkeypatch.setenv("BOOKREVIEWHUB_DB_PATH", ":memory:")
    init_engine_once()
    yield
    reset_for_tests(drop=True)


@pytest.fixture
def client():
    app = create_app({"TESTING": True, "WTF_CSRF_ENABLED": False, "SECRET_KEY": "test-secret"})
    return app.test_client()


@pytest.fixture
def book_id() -> int:
    book = SqlBookRepository().add(
        Book(title="Emma", author="Jane Austen", published_year=1815, genre="Novel", user_id="owner-1")
    )
    return book.id


@pytest.fixture
def review_id(book_id) -> int:
    review = SqlReviewRepository().add(Review(content="Witty", rating=4, book_id=book_id, user_id="author-1"))
    return review.id


def _login(client, user_id):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id


def test_index_and_details(client, review_id):
    assert "Witty" in client.get("/Reviews").get_data(as_text=True)

    resp = client.get(f"/Reviews/Details/{review_id}")
    assert resp.status_code == 200
    assert "Emma" in resp.get_data(as_text=True)
    assert client.get("/Reviews/Details/999").status_code == 404


def test_create_requires_login(client, book_id):
    resp = client.post("/Reviews/Create", data={"book_id": book_id, "content": "Nice", "rating": "5"})

    assert resp.status_code == 401


def test_create_redirects_to_book_reviews(client, book_id):
    _login(client, "reader-1")

    resp = client.post("/Reviews/Create", data={"book_id": book_id, "content": "Nice", "rating": "5"})

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith(f"/Books/Reviews/{book_id}")
    stored = SqlReviewRepository().get_by_book_id(book_id)
    assert [(r.content, r.user_id) for r in stored] == [("Nice", "reader-1")]


def test_create_with_bad_rating_rerenders_book_page(client, book_id):
    _login(client, "reader-1")

    resp = client.post("/Reviews/Create", data={"book_id": book_id, "content": "Nice", "rating": "6"})

    assert resp.status_code == 200
    assert "Rating must be between 1 and 5." in resp.get_data(as_text=True)
    assert SqlReviewRepository().get_by_book_id(book_id) == []


def test_create_for_unknown_book_is_404(client, book_id):
    _login(client, "reader-1")

    resp = client.post("/Reviews/Create", data={"book_id": book_id + 9, "content": "Nice", "rating": "3"})

    assert resp.status_code == 404


def test_edit_and_delete_are_author_only(client, review_id):
    _login(client, "intruder")

    assert client.get(f"/Reviews/Edit/{review_id}").status_code == 401
    assert client.post(f"/Reviews/Edit/{review_id}", data={"content": "x", "rating": "1"}).status_code == 401
    assert client.get(f"/Reviews/Delete/{review_id}").status_code == 401
    assert client.post(f"/Reviews/Delete/{review_id}").status_code == 401
    assert SqlReviewRepository().get_by_id(review_id).content == "Witty"


def test_author_edits_then_deletes(client, review_id):
    _login(client, "author-1")

    resp = client.post(f"/Reviews/Edit/{review_id}", data={"content": "Sharper", "rating": "5"})
    assert resp.status_code == 302
    assert SqlReviewRepository().get_by_id(review_id).rating == 5

    resp = client.post(f"/Reviews/Edit/{review_id}", data={"content": "", "rating": "5"})
    assert resp.status_code == 200
    assert "Content is required." in resp.get_data(as_text=True)

    assert client.post(f"/Reviews/Delete/{review_id}").status_code == 302
    assert SqlReviewRepository().get_by_id(review_id) is None


def test_vote_form_records_and_replaces_vote(client, book_id, review_id):
    _login(client, "voter-1")

    resp = client.post("/Reviews/Vote", data={"review_id": review_id, "is_upvote": "true"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith(f"/Books/Reviews/{book_id}")

    client.post("/Reviews/Vote", data={"review_id": review_id, "is_upvote": "false"})
    assert SqlReviewVoteRepository().count_for_review(review_id) == (0, 1)

    body = client.get(f"/Books/Reviews/{book_id}").get_data(as_text=True)
    assert "+0 / -1" in body


def test_vote_form_errors(client, review_id):
    assert client.post("/Reviews/Vote", data={"review_id": review_id, "is_upvote": "true"}).status_code == 401

    _login(client, "voter-1")
    assert client.post("/Reviews/Vote", data={"review_id": review_id, "is_upvote": "maybe"}).status_code == 400
    assert client.post("/Reviews/Vote", data={"review_id": review_id + 5, "is_upvote": "true"}).status_code == 404


def test_oversized_ids_are_not_found(client, book_id):
    huge = 10 ** 20
    _login(client, "reader-1")

    assert client.get(f"/Reviews/Details/{huge}").status_code == 404
    assert client.get(f"/Reviews/Edit/{huge}").status_code == 404
    assert client.post("/Reviews/Vote", data={"review_id": str(huge), "is_upvote": "true"}).status_code == 404
    resp = client.post("/Reviews/Create", data={"book_id": str(huge), "content": "Nice", "rating": "5"})
    assert resp.status_code == 404
