"""Session login, registration and logout pages.

A successful login stores ``user_id``/``email`` in the Flask session; the
rest of the application reads the identity from there.
"""
from __future__ import annotations

from typing import Any, List

from flask import Blueprint, redirect, request, url_for
from flask_babel import gettext as _

from bookreviewhub.db.repositories import UserExistsError
from bookreviewhub.services import ValidationFailedError, auth_service
from bookreviewhub.routes.helpers import error_message_for, render_page, sanitize_next
from bookreviewhub.utils.identity import clear_identity_session, remember_identity
from bookreviewhub.utils.logging import get_logger

LOG = get_logger("routes.auth")

bp = Blueprint("auth", __name__, url_prefix="/Account")


@bp.route("/Login", methods=["GET", "POST"])
def login():
    next_url = sanitize_next(request.values.get("next"))
    email_value = request.values.get("email") or ""
    form_errors: List[str] = []
    if request.method == "POST":
        user = auth_service.authenticate(email_value, request.form.get("password", ""))
        if user:
            remember_identity(user.id, user.email)
            LOG.info("User signed in user_id=%s", user.id)
            return redirect(next_url)
        form_errors.append(error_message_for("invalid_credentials") or _("Wrong email or password."))
    return render_page(
        "login.html",
        next_url=next_url,
        email_value=email_value,
        form_errors=form_errors,
    )


@bp.route("/Register", methods=["GET", "POST"])
def register():
    email_value = request.values.get("email") or ""
    name_value = request.values.get("name") or ""
    form_errors: List[str] = []
    if request.method == "POST":
        try:
            user = auth_service.register_user(
                email_value,
                request.form.get("password", ""),
                name_value,
            )
        except ValidationFailedError as exc:
            form_errors.extend(exc.messages())
        except UserExistsError:
            form_errors.append(error_message_for("user_exists") or "")
        else:
            remember_identity(user.id, user.email)
            return redirect(url_for("books.index"))
    return render_page(
        "register.html",
        email_value=email_value,
        name_value=name_value,
        form_errors=form_errors,
    )


@bp.route("/Logout", methods=["POST"])
def logout():
    clear_identity_session()
    return redirect(url_for("books.index"))


def register_auth(app: Any) -> None:
    if getattr(app, "_bookreviewhub_auth_bp", None):
        return
    app.register_blueprint(bp)
    setattr(app, "_bookreviewhub_auth_bp", bp)
    LOG.debug("auth blueprint registered")


__all__ = ["register_auth", "bp"]
