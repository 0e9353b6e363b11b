"""Service-level exceptions shared by the web and JSON routes.

The exception message is a short machine code (``book_not_found``,
``not_owner`` ...); routes translate codes into user-facing text.
"""
from __future__ import annotations

from typing import Dict, Optional


class ValidationFailedError(ValueError):
    """Raised when a submitted payload fails validation."""

    def __init__(self, errors: Dict[str, str], code: str = "validation_failed"):
        super().__init__(code)
        self.errors = dict(errors)

    def messages(self):
        return list(self.errors.values())


class NotFoundError(LookupError):
    """Raised when the requested record is missing or the path/body ids disagree."""


class UnauthorizedError(PermissionError):
    """Raised when the caller has no resolvable identity."""


class OwnershipError(UnauthorizedError):
    """Raised when the caller is not the owner of the record they try to change."""

    def __init__(self, code: str = "not_owner", *, owner_id: Optional[str] = None):
        super().__init__(code)
        self.owner_id = owner_id


class DuplicateBookError(RuntimeError):
    """Raised when a book with the same title and author already exists."""


__all__ = [
    "ValidationFailedError",
    "NotFoundError",
    "UnauthorizedError",
    "OwnershipError",
    "DuplicateBookError",
]
