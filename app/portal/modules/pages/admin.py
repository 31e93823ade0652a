from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, g, redirect, render_template, request, url_for
from sqlalchemy.exc import IntegrityError

from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.pages.models import Page
from app.portal.modules.pages.service import (
    create_page,
    delete_page,
    payload_from_form,
    update_page,
    validate_page_payload,
)
from app.portal.rbac import require_permission

bp = Blueprint("pages_admin", __name__)

_DUPLICATE_SLUG = "Slug is already in use."


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _get_or_404(s, page_id: int) -> Page:
    page = s.get(Page, page_id)
    if not page:
        abort(404)
    return page


# ---------- List ----------
@bp.get("/pages")
@require_permission("pages.view")
def pages_list():
    s = db_session()
    pages = s.query(Page).order_by(Page.last_updated.desc()).all()
    return render_template("admin/pages/list.html", pages=pages)


# ---------- New ----------
@bp.get("/pages/new")
@require_permission("pages.create")
def pages_new_get():
    return render_template("admin/pages/form.html", page=None, form=None)


@bp.post("/pages/new")
@require_permission("pages.create")
def pages_new_post():
    s = db_session()
    u = _current_user()
    payload = payload_from_form(request.form)

    errors = validate_page_payload(s, payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return render_template("admin/pages/form.html", page=None, form=payload), 400

    try:
        page = create_page(s, payload, u)
        s.commit()
    except IntegrityError:
        # Lost a race on the unique slug index.
        s.rollback()
        flash(_DUPLICATE_SLUG, "danger")
        return render_template("admin/pages/form.html", page=None, form=payload), 400

    current_app.logger.info("Page created (id=%s slug=%s user_id=%s)", page.id, page.slug, u.id)
    flash("Page created.", "success")
    return redirect(url_for("pages_admin.pages_list"))


# ---------- Edit ----------
@bp.get("/pages/<int:page_id>/edit")
@require_permission("pages.edit")
def page_edit_get(page_id: int):
    s = db_session()
    return render_template("admin/pages/form.html", page=_get_or_404(s, page_id), form=None)


@bp.post("/pages/<int:page_id>/edit")
@require_permission("pages.edit")
def page_edit_post(page_id: int):
    s = db_session()
    u = _current_user()
    page = _get_or_404(s, page_id)
    payload = payload_from_form(request.form)

    errors = validate_page_payload(s, payload, page_id=page.id)
    if errors:
        for e in errors:
            flash(e, "danger")
        return render_template("admin/pages/form.html", page=page, form=payload), 400

    try:
        update_page(s, page, payload, u)
        s.commit()
    except IntegrityError:
        s.rollback()
        flash(_DUPLICATE_SLUG, "danger")
        return render_template("admin/pages/form.html", page=s.get(Page, page_id), form=payload), 400

    flash("Page updated.", "success")
    return redirect(url_for("pages_admin.pages_list"))


# ---------- Delete ----------
@bp.get("/pages/<int:page_id>/delete")
@require_permission("pages.delete")
def page_delete_get(page_id: int):
    s = db_session()
    return render_template("admin/pages/delete.html", page=_get_or_404(s, page_id))


@bp.post("/pages/<int:page_id>/delete")
@require_permission("pages.delete")
def page_delete_post(page_id: int):
    s = db_session()
    u = _current_user()
    page = s.get(Page, page_id)
    if page:
        delete_page(s, page, u)
        s.commit()
        current_app.logger.info("Page deleted (id=%s user_id=%s)", page_id, u.id)
        flash("Page deleted.", "success")
    return redirect(url_for("pages_admin.pages_list"))
