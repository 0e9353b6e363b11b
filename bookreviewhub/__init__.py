"""BookReviewHub application package.

Routes live in `bookreviewhub.routes`, business rules in
`bookreviewhub.services` and persistence in `bookreviewhub.db`. The Flask
application itself is assembled by `bookreviewhub.startup.wiring.create_app`:

    flask --app bookreviewhub.startup.wiring:create_app run
"""

__all__ = [
]
