from flask import Blueprint, abort, render_template

from app.portal.db import db_session
from app.portal.modules.pages.service import get_published_page

bp = Blueprint("pages", __name__)


@bp.get("/<slug>")
def page_detail(slug: str):
    page = get_published_page(db_session(), slug)
    if page is None:
        abort(404)
    return render_template("public/page.html", page=page)
