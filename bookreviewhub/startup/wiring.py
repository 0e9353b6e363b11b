"""Flask application factory.

Wires configuration, the database engine, CSRF protection, Flask-Babel and
every blueprint onto a fresh Flask app.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from flask import Flask, redirect, url_for
from flask_babel import Babel
from flask_wtf.csrf import CSRFProtect

from bookreviewhub import config as app_config
from bookreviewhub.db.engine import init_engine_once, remove_scoped_session
from bookreviewhub.routes import (
    api_books,
    api_reviews,
    register_api_books,
    register_api_reviews,
    register_auth,
    register_books,
    register_health,
    register_reviews,
)
from bookreviewhub.startup.seed import seed_if_empty
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("wiring")

_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

csrf = CSRFProtect()
babel = Babel()


def register_routes(app: Any) -> None:
    register_books(app)
    register_reviews(app)
    register_auth(app)
    register_health(app)
    register_api_books(app)
    register_api_reviews(app)
    # JSON clients authenticate with the session cookie and send no form token.
    csrf.exempt(api_books.bp)
    csrf.exempt(api_reviews.bp)
    app.add_url_rule("/", endpoint="home", view_func=lambda: redirect(url_for("books.index")))


def _register_cli(app: Flask) -> None:
    @app.cli.command("seed")
    def seed_command():  # pragma: no cover - thin CLI wrapper
        """Insert the sample books when the catalog is empty."""
        result = seed_if_empty()
        print(f"[SEED] books={result['books']} reviews={result['reviews']}")


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask("bookreviewhub", template_folder=str(_TEMPLATES_DIR))
    app.config.update(
        SECRET_KEY=app_config.secret_key(),
        BABEL_DEFAULT_LOCALE="en",
    )
    if overrides:
        app.config.update(overrides)

    csrf.init_app(app)
    babel.init_app(app)
    init_engine_once()
    app.teardown_appcontext(remove_scoped_session)
    register_routes(app)
    _register_cli(app)
    if app_config.seed_on_start():
        seed_if_empty()
    LOG.info("App startup wiring complete: %s", app_config.summarize_runtime_config())
    return app


__all__ = ["create_app", "register_routes", "csrf", "babel"]
