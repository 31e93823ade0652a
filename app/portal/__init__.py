import logging
import os

from flask import Flask, g, render_template, request, session
from dotenv import load_dotenv

from app.portal.config import load_config
from app.portal.db import init_db, teardown_db_session
from app.portal import models  # noqa: F401  (platform models must load before module models)
from app.portal.routes import bp as routes_bp
from app.portal.auth import bp as auth_bp, load_current_user
from app.portal.admin import bp as admin_bp
from app.portal.modules.scholarships.views import bp as scholarships_bp
from app.portal.modules.scholarships.admin import bp as scholarships_admin_bp
from app.portal.modules.inquiries.views import bp as contact_bp
from app.portal.modules.inquiries.admin import bp as inquiries_admin_bp
from app.portal.modules.pages.admin import bp as pages_admin_bp
from app.portal.modules.pages.views import bp as pages_bp
from app.portal.rbac import user_has_permission
from app.portal.security import csrf_required, ensure_csrf_token, validate_csrf

logger = logging.getLogger(__name__)

# Requests that never touch the session or the database.
_BARE_PATHS = ("/static/", "/health", "/healthz")


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.logger.setLevel(app.config["LOG_LEVEL"])
    logging.getLogger("app.portal").setLevel(app.config["LOG_LEVEL"])

    _check_production_config(app)
    init_db(app)
    _dispose_engine_on_fork(app)

    _register_request_hooks(app)
    _register_template_helpers(app)
    _register_blueprints(app)
    _register_error_handlers(app)

    logger.info("create_app() complete; env=%s", app.config.get("ENV"))
    return app


def _check_production_config(app: Flask) -> None:
    """Refuse to boot a production app on SQLite or with the default secret."""
    env = (app.config.get("ENV") or "").strip().lower()
    if env not in ("prod", "production"):
        return
    db_url = str(app.config.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("DATABASE_URL is required in production.")
    if db_url.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must be a server database in production (not sqlite).")
    if str(app.config.get("SECRET_KEY") or "") in ("", "change-me"):
        raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")


def _dispose_engine_on_fork(app: Flask) -> None:
    # gunicorn --preload forks after create_app(); children must not share pooled connections.
    if not hasattr(os, "register_at_fork"):
        return

    def _after_fork_child():
        engine = app.extensions.get("sqlalchemy_engine")
        if engine:
            engine.dispose()
            logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

    os.register_at_fork(after_in_child=_after_fork_child)


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def _csrf_guard():
        if request.path.startswith(_BARE_PATHS):
            return None
        ensure_csrf_token()
        session.permanent = True
        if csrf_required(request) and not validate_csrf(request):
            app.logger.warning("CSRF validation failed (path=%s)", request.path)
            return render_template("errors/400.html", message="CSRF token missing or invalid."), 400
        return None

    @app.before_request
    def _load_user():
        if request.path.startswith(_BARE_PATHS):
            g.current_user = None
            return None
        return load_current_user()

    app.teardown_appcontext(teardown_db_session)


def _register_template_helpers(app: Flask) -> None:
    @app.context_processor
    def _inject_globals() -> dict:
        user = getattr(g, "current_user", None)

        def has_perm(key: str) -> bool:
            return user_has_permission(user, key)

        return {"csrf_token": ensure_csrf_token(), "has_perm": has_perm, "current_user": user}

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d") -> str:
        if value is None:
            return "-"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.template_filter("money")
    def _money_filter(value, currency: str | None = None) -> str:
        if value is None:
            return "-"
        amount = f"{value:,.2f}"
        return f"{currency} {amount}" if currency else amount


def _register_blueprints(app: Flask) -> None:
    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(scholarships_bp)
    app.register_blueprint(scholarships_admin_bp, url_prefix="/admin")
    app.register_blueprint(contact_bp)
    app.register_blueprint(inquiries_admin_bp, url_prefix="/admin")
    app.register_blueprint(pages_admin_bp, url_prefix="/admin")
    # Catch-all /<slug>; static rules above always win.
    app.register_blueprint(pages_bp)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(403)
    def _err_403(e):
        missing = getattr(g, "missing_permission", None)
        if missing:
            app.logger.warning("Forbidden: missing_permission=%s request_id=%s", missing, getattr(g, "request_id", None))
        return render_template("errors/403.html", missing_permission=missing), 403

    @app.errorhandler(404)
    def _err_404(e):
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def _err_500(e):
        rid = getattr(g, "request_id", None)
        app.logger.exception("Unhandled 500 (request_id=%s)", rid)
        return render_template("errors/500.html", request_id=rid), 500
