from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, g, redirect, render_template, request, url_for

from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.scholarships.models import Scholarship
from app.portal.modules.scholarships.service import (
    create_scholarship,
    delete_scholarship,
    payload_from_form,
    update_scholarship,
    update_scholarship_notes,
    validate_scholarship_payload,
)
from app.portal.rbac import require_permission
from app.portal.utils import utcnow

bp = Blueprint("scholarships_admin", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _get_or_404(s, scholarship_id: int) -> Scholarship:
    scholarship = s.get(Scholarship, scholarship_id)
    if not scholarship:
        abort(404)
    return scholarship


def _render_form(scholarship: Scholarship | None, form: dict | None = None):
    return render_template(
        "admin/scholarships/form.html",
        scholarship=scholarship,
        form=form,
        options=current_app.config["SCHOLARSHIP_FILTER_OPTIONS"],
    )


# ---------- List ----------
@bp.get("/scholarships")
@require_permission("scholarships.view")
def scholarships_list():
    s = db_session()
    scholarships = s.query(Scholarship).order_by(Scholarship.last_updated.desc()).all()
    return render_template("admin/scholarships/list.html", scholarships=scholarships, now=utcnow())


# ---------- New ----------
@bp.get("/scholarships/new")
@require_permission("scholarships.create")
def scholarships_new_get():
    return _render_form(None)


@bp.post("/scholarships/new")
@require_permission("scholarships.create")
def scholarships_new_post():
    s = db_session()
    u = _current_user()
    payload = payload_from_form(request.form)

    errors = validate_scholarship_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_form(None, payload), 400

    scholarship = create_scholarship(s, payload, u)
    s.commit()
    current_app.logger.info("Scholarship created (id=%s user_id=%s)", scholarship.id, u.id)

    flash("Scholarship created.", "success")
    return redirect(url_for("scholarships_admin.scholarships_list"))


# ---------- Edit ----------
@bp.get("/scholarships/<int:scholarship_id>/edit")
@require_permission("scholarships.edit")
def scholarship_edit_get(scholarship_id: int):
    s = db_session()
    return _render_form(_get_or_404(s, scholarship_id))


@bp.post("/scholarships/<int:scholarship_id>/edit")
@require_permission("scholarships.edit")
def scholarship_edit_post(scholarship_id: int):
    s = db_session()
    u = _current_user()
    scholarship = _get_or_404(s, scholarship_id)
    payload = payload_from_form(request.form)

    errors = validate_scholarship_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_form(scholarship, payload), 400

    update_scholarship(s, scholarship, payload, u)
    s.commit()

    flash("Scholarship updated.", "success")
    return redirect(url_for("scholarships_admin.scholarships_list"))


# ---------- Notes ----------
@bp.post("/scholarships/<int:scholarship_id>/notes")
@require_permission("scholarships.edit")
def scholarship_notes_post(scholarship_id: int):
    s = db_session()
    u = _current_user()
    scholarship = _get_or_404(s, scholarship_id)
    try:
        update_scholarship_notes(s, scholarship, request.form.get("admin_notes"), u)
    except ValueError as e:
        flash(str(e), "danger")
        return redirect(url_for("scholarships_admin.scholarship_edit_get", scholarship_id=scholarship_id))
    s.commit()
    flash("Notes saved.", "success")
    return redirect(url_for("scholarships_admin.scholarship_edit_get", scholarship_id=scholarship_id))


# ---------- Delete ----------
@bp.get("/scholarships/<int:scholarship_id>/delete")
@require_permission("scholarships.delete")
def scholarship_delete_get(scholarship_id: int):
    s = db_session()
    return render_template("admin/scholarships/delete.html", scholarship=_get_or_404(s, scholarship_id))


@bp.post("/scholarships/<int:scholarship_id>/delete")
@require_permission("scholarships.delete")
def scholarship_delete_post(scholarship_id: int):
    s = db_session()
    u = _current_user()
    scholarship = s.get(Scholarship, scholarship_id)
    # Already gone counts as deleted.
    if scholarship:
        delete_scholarship(s, scholarship, u)
        s.commit()
        current_app.logger.info("Scholarship deleted (id=%s user_id=%s)", scholarship_id, u.id)
        flash("Scholarship deleted.", "success")
    return redirect(url_for("scholarships_admin.scholarships_list"))
