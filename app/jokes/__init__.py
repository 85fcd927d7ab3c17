import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, render_template, request

from app.jokes.auth import bp as auth_bp
from app.jokes.config import is_production, load_config
from app.jokes.db import init_db, teardown_db_session
from app.jokes.modules.jokes.routes import bp as jokes_bp
from app.jokes.routes import bp as routes_bp
from app.jokes.security import ensure_csrf_token, validate_csrf
from app.jokes.session import get_user_id, load_current_user

logger = logging.getLogger(__name__)

_UNGUARDED_PREFIXES = ("/static/", "/health", "/healthz")


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=app.config["SESSION_LIFETIME_HOURS"])

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_current_user() -> dict:
        return {"current_user": getattr(g, "current_user", None)}

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(_UNGUARDED_PREFIXES):
            return None
        ensure_csrf_token()
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            # Login/register/logout carry no session state worth forging.
            if (request.endpoint or "").startswith("auth."):
                return None
            # Anonymous writes only ever end in a login redirect.
            if get_user_id() is None:
                return None
            if not validate_csrf(request):
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400
        return None

    # Production guardrails (fail fast with clear logs)
    if is_production(app.config.get("ENV")):
        db_url = str(app.config.get("DATABASE_URL") or "").strip()
        if not db_url:
            raise RuntimeError("DATABASE_URL is required in production.")
        if db_url.startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if str(app.config.get("SECRET_KEY") or "") in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    if hasattr(os, "register_at_fork"):

        def _after_fork_child() -> None:
            engine = app.extensions.get("sqlalchemy_engine")
            if engine:
                engine.dispose(close=False)

        os.register_at_fork(after_in_child=_after_fork_child)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(jokes_bp)

    app.before_request(load_current_user)
    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.error(
            "Unhandled 500 (request_id=%s)",
            getattr(g, "request_id", None),
            exc_info=getattr(e, "original_exception", None) or e,
        )
        return render_template("errors/500.html"), 500

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/http.html", error=e), 404

    logger.info("create_app() complete; app ready to serve")
    return app
