from __future__ import annotations

from flask import Blueprint, abort, current_app, render_template, request

from app.portal.db import db_session
from app.portal.modules.scholarships.query import (
    ScholarshipFilters,
    ScholarshipNotFound,
    get_scholarship_detail,
    list_scholarships,
)

bp = Blueprint("scholarships", __name__)


@bp.get("/scholarships")
def scholarship_list():
    s = db_session()
    filters = ScholarshipFilters.from_args(request.args)
    result = list_scholarships(s, filters, page=request.args.get("page"))
    return render_template(
        "scholarships/list.html",
        result=result,
        filters=result.filters,
        options=current_app.config["SCHOLARSHIP_FILTER_OPTIONS"],
    )


@bp.get("/scholarships/<int:scholarship_id>")
def scholarship_detail(scholarship_id: int):
    s = db_session()
    try:
        detail = get_scholarship_detail(s, scholarship_id)
    except ScholarshipNotFound:
        abort(404)
    return render_template(
        "scholarships/detail.html",
        scholarship=detail.scholarship,
        related=detail.related,
    )
