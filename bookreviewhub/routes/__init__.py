"""Blueprint registration entry points."""

from .api_books import register_api_books
from .api_reviews import register_api_reviews
from .auth import register_auth
from .books import register_books
from .health import register_health
from .reviews import register_reviews

__all__ = [
    "register_api_books",
    "register_api_reviews",
    "register_auth",
    "register_books",
    "register_health",
    "register_reviews",
]
