from __future__ import annotations

from datetime import date, datetime, time, timedelta

from flask import Blueprint, current_app, flash, g, render_template, request
from sqlalchemy import func, text
from sqlalchemy.orm import Session

from app.portal.db import db_session
from app.portal.models import AuditEvent
from app.portal.modules.inquiries.models import ContactInquiry
from app.portal.modules.pages.models import Page
from app.portal.modules.scholarships.models import Scholarship
from app.portal.modules.scholarships.query import ScholarshipFilters, build_listing_clauses
from app.portal.rbac import permission_keys, require_permission
from app.portal.utils import utcnow

bp = Blueprint("admin", __name__)

RECENT_LIMIT = 5


def _parse_date(s: str) -> date | None:
    s = (s or "").strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


def _count(s: Session, model, *criteria) -> int:
    return s.query(func.count(model.id)).filter(*criteria).scalar() or 0


def dashboard_stats(s: Session, now: datetime | None = None) -> dict:
    now = now or utcnow()
    return {
        "total_scholarships": _count(s, Scholarship),
        "active_scholarships": _count(s, Scholarship, *build_listing_clauses(ScholarshipFilters(), now)),
        "total_pages": _count(s, Page),
        "published_pages": _count(s, Page, Page.is_published.is_(True)),
        "total_inquiries": _count(s, ContactInquiry),
        "unread_inquiries": _count(
            s,
            ContactInquiry,
            ContactInquiry.is_read.is_(False),
            ContactInquiry.is_archived.is_(False),
        ),
    }


@bp.get("/")
@require_permission("admin.view")
def index():
    s = db_session()

    db_connected, db_error = False, None
    try:
        s.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        current_app.logger.error("Dashboard DB check failed: %s", e)
        db_error = str(e)
        s.rollback()

    stats = dashboard_stats(s) if db_connected else {}
    recent_inquiries = (
        s.query(ContactInquiry).order_by(ContactInquiry.created_at.desc()).limit(RECENT_LIMIT).all() if db_connected else []
    )
    recent_scholarships = (
        s.query(Scholarship).order_by(Scholarship.created_at.desc()).limit(RECENT_LIMIT).all() if db_connected else []
    )
    return render_template(
        "admin/index.html",
        stats=stats,
        recent_inquiries=recent_inquiries,
        recent_scholarships=recent_scholarships,
        system_status={"env": current_app.config.get("ENV"), "db_connected": db_connected, "db_error": db_error},
    )


@bp.get("/audit")
@require_permission("admin.view")
def audit_list():
    """
    Audit trail (last 200 events) with simple filters:
    - action (contains)
    - actor_email (contains)
    - date range (YYYY-MM-DD)
    """
    s = db_session()
    action = (request.args.get("action") or "").strip()
    actor_email = (request.args.get("actor_email") or "").strip()
    date_from = _parse_date(request.args.get("date_from") or "")
    date_to = _parse_date(request.args.get("date_to") or "")

    if (request.args.get("date_from") or "").strip() and not date_from:
        flash("date_from must be YYYY-MM-DD", "danger")
    if (request.args.get("date_to") or "").strip() and not date_to:
        flash("date_to must be YYYY-MM-DD", "danger")

    q = s.query(AuditEvent)
    if action:
        q = q.filter(AuditEvent.action.like(f"%{action}%"))
    if actor_email:
        q = q.filter(AuditEvent.actor_user_email.like(f"%{actor_email.lower()}%"))
    if date_from:
        q = q.filter(AuditEvent.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        # inclusive end-date (treat as whole day)
        q = q.filter(AuditEvent.created_at < datetime.combine(date_to + timedelta(days=1), time.min))

    events = q.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(200).all()
    return render_template(
        "admin/audit/list.html",
        events=events,
        action=action,
        actor_email=actor_email,
        date_from=date_from,
        date_to=date_to,
    )


@bp.get("/me")
@require_permission("admin.view")
def me():
    user = getattr(g, "current_user", None)
    role_keys = sorted(r.key for r in (user.roles or []))
    perm_keys = sorted(permission_keys(user))
    return render_template("admin/me.html", user=user, role_keys=role_keys, perm_keys=perm_keys)
