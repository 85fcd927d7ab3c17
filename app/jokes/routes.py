from flask import Blueprint, render_template

from app.jokes.db import db_session
from app.jokes.modules.jokes.service import recent_jokes

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    latest = recent_jokes(db_session(), limit=1)
    return render_template("public/index.html", latest_joke=latest[0] if latest else None)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Liveness probe. No DB access.
    """
    return "ok", 200
