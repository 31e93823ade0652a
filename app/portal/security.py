"""
CSRF protection for form posts.

One random token per session. Every state-changing request outside the auth
blueprint must send it back in the `csrf_token` form field or the
X-CSRF-Token header.
"""
import secrets

from flask import Request, session

SESSION_KEY = "csrf_token"
FORM_FIELD = "csrf_token"
HEADER = "X-CSRF-Token"
UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
EXEMPT_BLUEPRINTS = frozenset({"auth"})


def ensure_csrf_token() -> str:
    token = session.get(SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        session[SESSION_KEY] = token
    return token


def csrf_required(req: Request) -> bool:
    return req.method in UNSAFE_METHODS and req.blueprint not in EXEMPT_BLUEPRINTS


def validate_csrf(req: Request) -> bool:
    submitted = req.headers.get(HEADER) or req.form.get(FORM_FIELD)
    expected = session.get(SESSION_KEY)
    if not submitted or not expected:
        return False
    return secrets.compare_digest(submitted, expected)
