from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.inquiries.models import ContactInquiry
from app.portal.modules.inquiries.service import (
    STATUS_FILTERS,
    delete_inquiry,
    filter_inquiries,
    mark_read,
    set_archived,
    update_inquiry_notes,
)
from app.portal.rbac import require_permission

bp = Blueprint("inquiries_admin", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _get_or_404(s, inquiry_id: int) -> ContactInquiry:
    inquiry = s.get(ContactInquiry, inquiry_id)
    if not inquiry:
        abort(404)
    return inquiry


def _back_to_list():
    return redirect(url_for("inquiries_admin.inquiries_list"))


# ---------- List ----------
@bp.get("/inquiries")
@require_permission("inquiries.view")
def inquiries_list():
    s = db_session()
    status = (request.args.get("status") or "").strip().lower()
    if status not in STATUS_FILTERS:
        status = ""
    q = filter_inquiries(s.query(ContactInquiry), status)
    inquiries = q.order_by(ContactInquiry.created_at.desc(), ContactInquiry.id.desc()).all()
    return render_template(
        "admin/inquiries/list.html",
        inquiries=inquiries,
        status=status,
        status_filters=STATUS_FILTERS,
    )


# ---------- Detail ----------
@bp.get("/inquiries/<int:inquiry_id>")
@require_permission("inquiries.view")
def inquiry_detail(inquiry_id: int):
    s = db_session()
    inquiry = _get_or_404(s, inquiry_id)
    # Viewing counts as reading.
    if mark_read(s, inquiry, _current_user()):
        s.commit()
    return render_template("admin/inquiries/detail.html", inquiry=inquiry)


# ---------- Triage ----------
@bp.post("/inquiries/<int:inquiry_id>/read")
@require_permission("inquiries.edit")
def inquiry_mark_read(inquiry_id: int):
    s = db_session()
    inquiry = s.get(ContactInquiry, inquiry_id)
    if inquiry and mark_read(s, inquiry, _current_user()):
        s.commit()
    return _back_to_list()


@bp.post("/inquiries/<int:inquiry_id>/archive")
@require_permission("inquiries.edit")
def inquiry_archive(inquiry_id: int):
    s = db_session()
    inquiry = s.get(ContactInquiry, inquiry_id)
    if inquiry:
        set_archived(s, inquiry, True, _current_user())
        s.commit()
        flash("Inquiry archived.", "success")
    return _back_to_list()


@bp.post("/inquiries/<int:inquiry_id>/unarchive")
@require_permission("inquiries.edit")
def inquiry_unarchive(inquiry_id: int):
    s = db_session()
    inquiry = s.get(ContactInquiry, inquiry_id)
    if inquiry:
        set_archived(s, inquiry, False, _current_user())
        s.commit()
        flash("Inquiry restored.", "success")
    return _back_to_list()


@bp.post("/inquiries/<int:inquiry_id>/notes")
@require_permission("inquiries.edit")
def inquiry_notes_post(inquiry_id: int):
    s = db_session()
    inquiry = _get_or_404(s, inquiry_id)
    try:
        update_inquiry_notes(s, inquiry, request.form.get("admin_notes"), _current_user())
    except ValueError as e:
        flash(str(e), "danger")
    else:
        s.commit()
        flash("Notes saved.", "success")
    return redirect(url_for("inquiries_admin.inquiry_detail", inquiry_id=inquiry_id))


# ---------- Delete ----------
@bp.post("/inquiries/<int:inquiry_id>/delete")
@require_permission("inquiries.delete")
def inquiry_delete(inquiry_id: int):
    s = db_session()
    inquiry = s.get(ContactInquiry, inquiry_id)
    if inquiry:
        delete_inquiry(s, inquiry, _current_user())
        s.commit()
        flash("Inquiry deleted.", "success")
    return _back_to_list()
