from flask import Blueprint, render_template

from app.portal.db import db_session
from app.portal.modules.scholarships.query import list_featured_scholarships

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    featured = list_featured_scholarships(db_session())
    return render_template("public/index.html", featured_scholarships=featured)


@bp.get("/privacy")
def privacy():
    return render_template("public/privacy.html")


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for load balancer probes. No DB access.
    """
    return "ok", 200
