"""
Staff sign-in for the admin back office.

There is no public self-registration: admin accounts come from
scripts/init_db.py or scripts/attach_admin_role.py.
"""
from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta

from flask import Blueprint, current_app, flash, g, redirect, render_template, request, session, url_for
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash

from app.portal.audit import record_event
from app.portal.db import db_session
from app.portal.models import User
from app.portal.utils import is_local_redirect, utcnow

bp = Blueprint("auth", __name__)


class LoginThrottle:
    """Per-client sliding window of login attempts (process-local)."""

    def __init__(self, limit: int, window: timedelta) -> None:
        self.limit = limit
        self.window = window
        self._attempts: dict[str, list[datetime]] = defaultdict(list)

    def blocked(self, key: str) -> bool:
        cutoff = utcnow() - self.window
        recent = [t for t in self._attempts[key] if t > cutoff]
        self._attempts[key] = recent
        return len(recent) >= self.limit

    def hit(self, key: str) -> None:
        self._attempts[key].append(utcnow())

    def forget(self, key: str) -> None:
        self._attempts.pop(key, None)

    def reset(self) -> None:
        self._attempts.clear()


login_throttle = LoginThrottle(limit=5, window=timedelta(minutes=5))


def load_current_user() -> None:
    """
    Loads g.current_user from the signed session cookie.
    Also assigns a per-request request_id (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None

    user_id = session.get("user_id")
    if not user_id:
        return

    try:
        user = db_session().get(User, int(user_id))
    except Exception as e:
        current_app.logger.error("load_current_user DB error (clearing session): %s", e)
        session.pop("user_id", None)
        return
    if not user or not user.is_active:
        session.pop("user_id", None)
        return
    g.current_user = user


def _authenticate(s: Session, email: str, password: str) -> User | None:
    user = s.query(User).filter(User.email == email).one_or_none()
    if not user or not user.is_active or not check_password_hash(user.password_hash, password):
        return None
    return user


@bp.get("/login")
def login_get():
    nxt = (request.args.get("next") or "").strip()
    return render_template("auth/login.html", next=nxt)


@bp.post("/login")
def login_post():
    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password") or ""
    nxt = (request.form.get("next") or "").strip()
    ip = request.remote_addr or "unknown"

    if login_throttle.blocked(ip):
        current_app.logger.warning("Login rate limit hit (ip=%s)", ip)
        flash("Too many login attempts. Please wait 5 minutes.", "danger")
        return redirect(url_for("auth.login_get"))
    login_throttle.hit(ip)

    s = db_session()
    user = _authenticate(s, email, password)
    if user is None:
        record_event(
            s,
            actor=None,
            action="auth.login_failed",
            entity_type="User",
            entity_id=email,
            reason="Invalid credentials",
            metadata={"email": email},
        )
        s.commit()
        current_app.logger.warning("Invalid login attempt (email=%s ip=%s)", email, ip)
        flash("Invalid login attempt.", "danger")
        return redirect(url_for("auth.login_get", next=nxt or None))

    # Fresh session on sign-in (drops any pre-login state, CSRF token included).
    session.clear()
    session["user_id"] = user.id
    login_throttle.forget(ip)
    record_event(s, actor=user, action="auth.login", entity_type="User", entity_id=str(user.id))
    s.commit()
    current_app.logger.info("User logged in (user_id=%s)", user.id)
    return redirect(nxt if is_local_redirect(nxt) else url_for("admin.index"))


@bp.get("/logout")
def logout():
    user = getattr(g, "current_user", None)
    if user:
        s = db_session()
        record_event(s, actor=user, action="auth.logout", entity_type="User", entity_id=str(user.id))
        s.commit()
        current_app.logger.info("User logged out (user_id=%s)", user.id)
    session.pop("user_id", None)
    return redirect(url_for("routes.index"))


@bp.route("/register", methods=["GET", "POST"])
def register():
    return redirect(url_for("auth.login_get"))
