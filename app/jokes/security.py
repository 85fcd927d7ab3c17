import secrets

from flask import Request, session


def ensure_csrf_token() -> str:
    """Ensure a CSRF token exists in the session and return it."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def validate_csrf(req: Request) -> bool:
    """Validate the CSRF token sent as a form field or X-CSRF-Token header."""
    token = req.headers.get("X-CSRF-Token") or req.form.get("csrf_token")
    expected = session.get("csrf_token")
    return bool(token and expected and secrets.compare_digest(token, expected))


def is_safe_redirect(target: str | None) -> bool:
    """Only local absolute paths are allowed as post-login redirects."""
    if not target:
        return False
    return target.startswith("/") and not target.startswith("//") and "\\" not in target
