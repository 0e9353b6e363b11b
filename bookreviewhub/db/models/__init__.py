"""ORM models aggregate exports."""
from .books import (  # noqa: F401
	Base,
	Book,
	Review,
	ReviewVote,
	User,
)

__all__ = [
	"Base",
	"Book",
	"Review",
	"ReviewVote",
	"User",
]
