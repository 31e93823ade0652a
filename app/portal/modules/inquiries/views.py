from __future__ import annotations

from flask import Blueprint, current_app, flash, g, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from app.portal.constants import INQUIRY_TYPES
from app.portal.db import db_session
from app.portal.modules.inquiries.service import payload_from_form, submit_inquiry, validate_inquiry_payload

bp = Blueprint("contact", __name__)

SUCCESS_MESSAGE = "Thank you for your message! We'll get back to you soon."
FAILURE_MESSAGE = "An error occurred while sending your message. Please try again."


def _render_form(form: dict | None = None, errors: list[str] | None = None):
    return render_template("contact/index.html", form=form or {}, errors=errors or [], inquiry_types=INQUIRY_TYPES)


@bp.get("/contact")
def contact_get():
    return _render_form()


@bp.post("/contact")
def contact_post():
    payload = payload_from_form(request.form)
    errors = validate_inquiry_payload(payload)
    if errors:
        return _render_form(payload, errors)

    s = db_session()
    try:
        inquiry = submit_inquiry(s, payload)
        s.commit()
    except SQLAlchemyError:
        s.rollback()
        current_app.logger.exception("Error submitting contact inquiry (request_id=%s)", getattr(g, "request_id", None))
        return _render_form(payload, [FAILURE_MESSAGE])

    current_app.logger.info("Contact inquiry received (id=%s type=%s)", inquiry.id, inquiry.inquiry_type)
    flash(SUCCESS_MESSAGE, "success")
    return redirect(url_for("contact.contact_get"))
