from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta

from flask import Blueprint, current_app, flash, g, redirect, render_template, request, url_for

from app.jokes.audit import record_event
from app.jokes.db import db_session
from app.jokes.security import is_safe_redirect
from app.jokes.session import create_user_session, login, logout, register, username_taken

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds

LOGIN_TYPES = ("login", "register")
DEFAULT_REDIRECT = "/jokes"


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=_LOGIN_RATE_WINDOW)
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= _LOGIN_RATE_LIMIT


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def validate_username(username: str) -> str | None:
    if len(username) < 3:
        return "Usernames must be at least 3 characters long"
    return None


def validate_password(password: str) -> str | None:
    if len(password) < 6:
        return "Passwords must be at least 6 characters long"
    return None


def validate_redirect(target: str | None) -> str:
    if is_safe_redirect(target):
        return target  # type: ignore[return-value]
    return DEFAULT_REDIRECT


def _render_login(*, fields=None, field_errors=None, form_error=None, redirect_to="", status=200):
    return (
        render_template(
            "auth/login.html",
            fields=fields,
            field_errors=field_errors,
            form_error=form_error,
            redirect_to=redirect_to,
        ),
        status,
    )


@bp.get("/login")
def login_get():
    redirect_to = (request.args.get("redirectTo") or "").strip()
    return _render_login(redirect_to=redirect_to)


@bp.post("/login")
def login_post():
    login_type = request.form.get("loginType")
    username = request.form.get("username")
    password = request.form.get("password")
    redirect_to = validate_redirect((request.form.get("redirectTo") or "").strip())
    ip = request.remote_addr or "unknown"

    if login_type is None or username is None or password is None:
        return _render_login(form_error="Form not submitted correctly", redirect_to=redirect_to, status=400)

    username = username.strip()
    fields = {"loginType": login_type, "username": username, "password": password}
    field_errors = {
        "username": validate_username(username),
        "password": validate_password(password),
    }
    if any(field_errors.values()):
        return _render_login(fields=fields, field_errors=field_errors, redirect_to=redirect_to, status=400)

    s = db_session()
    if login_type == "login":
        if _check_rate_limit(ip):
            flash("Too many login attempts. Please wait 5 minutes.", "danger")
            return redirect(url_for("auth.login_get", redirectTo=redirect_to))
        _record_attempt(ip)

        user = login(s, username, password)
        if user is None:
            record_event(
                s,
                actor=None,
                action="auth.login_failed",
                entity_type="User",
                entity_id=username,
                metadata={"username": username},
            )
            s.commit()
            current_app.logger.info("Login failed (username=%s request_id=%s)", username, getattr(g, "request_id", None))
            return _render_login(
                fields=fields,
                form_error="Username/Password combination is incorrect",
                redirect_to=redirect_to,
                status=400,
            )
        _login_attempts[ip].clear()
        record_event(s, actor=user, action="auth.login", entity_type="User", entity_id=user.id)
        s.commit()
        return create_user_session(user, redirect_to)

    if login_type == "register":
        if username_taken(s, username):
            return _render_login(
                fields=fields,
                form_error=f"User with username {username} already exists",
                redirect_to=redirect_to,
                status=400,
            )
        user = register(s, username, password)
        record_event(s, actor=user, action="auth.register", entity_type="User", entity_id=user.id)
        s.commit()
        current_app.logger.info("Registered user %s (id=%s)", user.username, user.id)
        return create_user_session(user, redirect_to)

    return _render_login(fields=fields, form_error="Login type invalid", redirect_to=redirect_to, status=400)


@bp.post("/logout")
def logout_post():
    user = getattr(g, "current_user", None)
    if user:
        s = db_session()
        record_event(s, actor=user, action="auth.logout", entity_type="User", entity_id=user.id)
        s.commit()
    return logout()
