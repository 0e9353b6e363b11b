"""Tests for sample catalog seeding."""
from __future__ import annotations

import pytest

from bookreviewhub.db.engine import init_engine_once, reset_for_tests
from bookreviewhub.db.repositories import SqlBookRepository
from bookreviewhub.startup.seed import SEED_USER_ID, seed_if_empty


@pytest.fixture(autouse=True)
def in_memory_db(monkeypatch):
    reset_for_tests(drop=True)
    monkeypatch.delenv("BOOKREVIEWHUB_DATABASE_URL", raising=False)
    monkeypatch.setenv("BOOKREVIEWHUB_DB_PATH", ":memory:")
    init_engine_once()
    yield
    reset_for_tests(drop=True)


def test_seed_inserts_sample_books_once():
    first = seed_if_empty()
    second = seed_if_empty()

    books = SqlBookRepository().get_all()
    assert first == {"books": 2, "reviews": 2}
    assert second == {"books": 0, "reviews": 0}
    assert [b.title for b in books] == ["The Name of the Rose", "The Little Prince"]
    assert {b.user_id for b in books} == {SEED_USER_ID}
    assert [r.rating for r in books[0].reviews] == [5]
