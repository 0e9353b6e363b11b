"""Input contracts for book/review creation, review edits and votes.

Each DTO can be built from an HTML form (snake_case field names) or from a
JSON body (camelCase, as exposed by the API) and reports problems through
`validate()` as a ``{field: message}`` mapping; an empty mapping means valid.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from flask_babel import gettext as _

MIN_RATING = 1
MAX_RATING = 5
MIN_YEAR = 1
MAX_YEAR = 9999
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
# form field -> JSON body field, where they differ
_JSON_FIELD_NAMES = {
    "published_year": "publishedYear",
    "book_id": "bookId",
    "is_upvote": "isUpvote",
}


def _clean_text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def _parse_int(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


def json_field_errors(errors: Mapping[str, str]) -> Dict[str, str]:
    """Re-key `validate()` output by the field names a JSON client sent."""
    return {_JSON_FIELD_NAMES.get(field, field): message for field, message in errors.items()}


def _parse_bool(raw: Any) -> Optional[bool]:
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return None
    value = str(raw).strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


@dataclass
class BookCreateDto:
    title: str = ""
    author: str = ""
    published_year: Optional[int] = None
    genre: str = ""
    id: Optional[int] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "BookCreateDto":
        return cls(
            title=_clean_text(form.get("title")),
            author=_clean_text(form.get("author")),
            published_year=_parse_int(form.get("published_year")),
            genre=_clean_text(form.get("genre")),
            id=_parse_int(form.get("id")),
        )

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "BookCreateDto":
        return cls(
            title=_clean_text(payload.get("title")),
            author=_clean_text(payload.get("author")),
            published_year=_parse_int(payload.get("publishedYear")),
            genre=_clean_text(payload.get("genre")),
            id=_parse_int(payload.get("id")),
        )

    def validate(self) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        if not self.title:
            errors["title"] = _("Title is required.")
        if not self.author:
            errors["author"] = _("Author is required.")
        if self.published_year is None:
            errors["published_year"] = _("Published year is required.")
        elif not MIN_YEAR <= self.published_year <= MAX_YEAR:
            errors["published_year"] = _(
                "Published year must be between %(low)s and %(high)s.", low=MIN_YEAR, high=MAX_YEAR
            )
        if not self.genre:
            errors["genre"] = _("Genre is required.")
        return errors

    def as_form_values(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "published_year": "" if self.published_year is None else self.published_year,
            "genre": self.genre,
        }


def _validate_review_fields(content: str, rating: Optional[int]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not content:
        errors["content"] = _("Content is required.")
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        errors["rating"] = _("Rating must be between 1 and 5.")
    return errors


@dataclass
class ReviewCreateDto:
    content: str = ""
    rating: Optional[int] = None
    book_id: Optional[int] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ReviewCreateDto":
        return cls(
            content=_clean_text(form.get("content")),
            rating=_parse_int(form.get("rating")),
            book_id=_parse_int(form.get("book_id")),
        )

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ReviewCreateDto":
        return cls(
            content=_clean_text(payload.get("content")),
            rating=_parse_int(payload.get("rating")),
            book_id=_parse_int(payload.get("bookId")),
        )

    def validate(self) -> Dict[str, str]:
        errors = _validate_review_fields(self.content, self.rating)
        if self.book_id is None:
            errors["book_id"] = _("Book is required.")
        return errors


@dataclass
class ReviewEditDto:
    content: str = ""
    rating: Optional[int] = None
    id: Optional[int] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ReviewEditDto":
        return cls(
            content=_clean_text(form.get("content")),
            rating=_parse_int(form.get("rating")),
            id=_parse_int(form.get("id")),
        )

    def validate(self) -> Dict[str, str]:
        return _validate_review_fields(self.content, self.rating)


@dataclass
class ReviewVoteDto:
    is_upvote: Optional[bool] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ReviewVoteDto":
        return cls(is_upvote=_parse_bool(form.get("is_upvote")))

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ReviewVoteDto":
        raw = payload.get("isUpvote")
        return cls(is_upvote=raw if isinstance(raw, bool) else None)

    def validate(self) -> Dict[str, str]:
        if self.is_upvote is None:
            return {"is_upvote": _("isUpvote must be a boolean.")}
        return {}


__all__ = [
    "MIN_RATING",
    "MAX_RATING",
    "MIN_YEAR",
    "MAX_YEAR",
    "json_field_errors",
    "BookCreateDto",
    "ReviewCreateDto",
    "ReviewEditDto",
    "ReviewVoteDto",
]
