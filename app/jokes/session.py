"""
Session-backed identity.

The user id lives in Flask's signed session cookie. Two lookups sit on top of
`_session_user_id()`:

- `get_user_id()` is optional and returns None for anonymous visitors.
- `require_user_id()` aborts the request with a redirect to the login page,
  carrying the page to come back to as `redirectTo`.
"""
from __future__ import annotations

import uuid

from flask import abort, current_app, g, redirect, request, session, url_for
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash
from werkzeug.wrappers import Response

from app.jokes.db import db_session
from app.jokes.models import User

SESSION_USER_KEY = "user_id"


def _session_user_id() -> str | None:
    user_id = session.get(SESSION_USER_KEY)
    if not user_id or not isinstance(user_id, str):
        return None
    return user_id


def get_user_id() -> str | None:
    return _session_user_id()


def require_user_id(redirect_to: str | None = None) -> str:
    user_id = _session_user_id()
    if not user_id:
        target = redirect_to or request.path
        abort(redirect(url_for("auth.login_get", redirectTo=target)))
    return user_id


def load_current_user() -> None:
    """
    Loads g.current_user from the session cookie and assigns a per-request
    request_id (for audit/log correlation). Stale ids are dropped.
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None
    if request.path.startswith(("/static/", "/health", "/healthz")):
        return

    user_id = _session_user_id()
    if not user_id:
        return

    try:
        user = db_session().get(User, user_id)
    except SQLAlchemyError as e:
        current_app.logger.error("load_current_user DB error (clearing session): %s", e)
        user = None
    if user is None:
        session.pop(SESSION_USER_KEY, None)
        return
    g.current_user = user


def login(s: Session, username: str, password: str) -> User | None:
    user = s.query(User).filter(User.username == username).one_or_none()
    if user is None or not check_password_hash(user.password_hash, password):
        return None
    return user


def register(s: Session, username: str, password: str) -> User:
    user = User(username=username, password_hash=generate_password_hash(password))
    s.add(user)
    s.flush()
    return user


def username_taken(s: Session, username: str) -> bool:
    return s.query(User.id).filter(User.username == username).first() is not None


def create_user_session(user: User, redirect_to: str) -> Response:
    session[SESSION_USER_KEY] = user.id
    session.permanent = True
    return redirect(redirect_to)


def logout() -> Response:
    session.pop(SESSION_USER_KEY, None)
    return redirect(url_for("routes.index"))
