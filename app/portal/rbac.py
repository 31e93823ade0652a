from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import abort, g, redirect, request, url_for

from app.portal.models import User


def permission_keys(user: User | None) -> set[str]:
    """Every permission granted to `user` through any of its roles (empty for anonymous/inactive)."""
    if not user or not user.is_active:
        return set()
    return {perm.key for role in (user.roles or []) for perm in (role.permissions or [])}


def user_has_permission(user: User | None, permission_key: str) -> bool:
    return permission_key in permission_keys(user)


def _login_redirect():
    # full_path ends with '?' when there is no query string.
    nxt = (request.full_path or request.path).rstrip("?")
    return redirect(url_for("auth.login_get", next=nxt))


def require_permission(permission_key: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Guard an admin view.

    Anonymous visitors go to the login page (and come back afterwards);
    signed-in users without `permission_key` get a 403 naming it.
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user: User | None = getattr(g, "current_user", None)
            if not user or not user.is_active:
                return _login_redirect()
            if not user_has_permission(user, permission_key):
                g.missing_permission = permission_key
                abort(403)
            return fn(*args, **kwargs)

        return wrapped

    return decorator
