import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    session_lifetime_hours: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer (got {raw!r}).")


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///jokes.db"),
        session_lifetime_hours=_getenv_int("SESSION_LIFETIME_HOURS", 24 * 30),
    )


def is_production(env: str | None) -> bool:
    return (env or "").strip().lower() in ("prod", "production")


def load_config() -> dict:
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "SESSION_LIFETIME_HOURS": s.session_lifetime_hours,
        # session cookie defaults
        "SESSION_COOKIE_NAME": "jokes_session",
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production(s.env),
        # forms only carry two short text fields
        "MAX_CONTENT_LENGTH": 1 * 1024 * 1024,
    }
