"""Service exports."""

from .errors import (
    DuplicateBookError,
    NotFoundError,
    OwnershipError,
    UnauthorizedError,
    ValidationFailedError,
)
from .dtos import (
    BookCreateDto,
    ReviewCreateDto,
    ReviewEditDto,
    ReviewVoteDto,
)
from . import auth_service, books_service, reviews_service

__all__ = [
    "DuplicateBookError",
    "NotFoundError",
    "OwnershipError",
    "UnauthorizedError",
    "ValidationFailedError",
    "BookCreateDto",
    "ReviewCreateDto",
    "ReviewEditDto",
    "ReviewVoteDto",
    "auth_service",
    "books_service",
    "reviews_service",
]
