"""Shared response helpers for the HTML and JSON blueprints."""
from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import urlencode

from flask import jsonify, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_wtf.csrf import generate_csrf

from bookreviewhub.utils.identity import get_current_user_email, get_current_user_id


def _error_messages() -> Dict[str, str]:
    return {
        "book_not_found": _("Book not found."),
        "review_not_found": _("Review not found."),
        "login_required": _("Sign in to continue."),
        "not_owner": _("Only the owner can change this record."),
        "duplicate_book": _("A book with the same title and author already exists."),
        "validation_failed": _("Submitted data is invalid."),
        "id_mismatch": _("Record id does not match the request."),
        "user_exists": _("An account with this email already exists."),
        "invalid_credentials": _("Wrong email or password."),
    }


def error_message_for(code: str) -> Optional[str]:
    return _error_messages().get(code)


def json_error(
    code: str,
    status: int = 400,
    *,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
):
    payload: Dict[str, Any] = {"error": code}
    final_message = message or error_message_for(code)
    if final_message:
        payload["message"] = final_message
    if details is not None:
        payload["errors"] = details
    return jsonify(payload), status


def json_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def sanitize_next(raw_target: Optional[str]) -> str:
    target = raw_target or None
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("books.index")


def login_redirect():
    target = request.full_path or request.path or "/"
    if target.endswith("?"):
        target = target[:-1]
    return redirect(f"{url_for('auth.login')}?{urlencode({'next': target})}")


def render_page(template_name: str, status: int = 200, **context):
    """Render a page with the caller identity and a CSRF token in context."""
    context.setdefault("form_errors", [])
    body = render_template(
        template_name,
        csrf_token_value=generate_csrf(),
        current_user_id=get_current_user_id(),
        current_user_email=get_current_user_email(),
        **context,
    )
    return body, status


__all__ = [
    "error_message_for",
    "json_error",
    "json_payload",
    "sanitize_next",
    "login_redirect",
    "render_page",
]
