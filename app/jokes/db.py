from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Generator

from flask import Flask, current_app, g
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def _engine_kwargs(db_url: str) -> dict[str, object]:
    kwargs: dict[str, object] = {"pool_pre_ping": True}
    if db_url.startswith("postgres"):
        kwargs.update(
            {
                "pool_recycle": 1800,
                "pool_size": 5,
                "max_overflow": 10,
                "pool_timeout": 30,
            }
        )
    return kwargs


def init_db(app: Flask) -> Engine:
    db_url = app.config["DATABASE_URL"]
    engine = create_engine(db_url, **_engine_kwargs(db_url))

    if db_url.startswith("sqlite"):
        # SQLite leaves foreign keys off unless asked per connection.
        @event.listens_for(engine, "connect")
        def _sqlite_foreign_keys(dbapi_connection, connection_record):  # type: ignore[no-redef]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        expire_on_commit=False,
    )
    app.logger.debug("Database engine ready (dialect=%s)", engine.dialect.name)
    return engine


def db_session() -> Session:
    """
    Request-scoped session, created lazily and closed on app-context teardown.
    """
    s: Session | None = getattr(g, "db_session", None)
    if s is not None:
        return s
    sm = current_app.extensions["sqlalchemy_sessionmaker"]
    g.db_session = sm()
    return g.db_session


def teardown_db_session(_exc: BaseException | None) -> None:
    s: Session | None = g.pop("db_session", None)
    if s is not None:
        s.close()


@contextmanager
def session_scope(app: Flask) -> Generator[Session, None, None]:
    """
    Session for scripts and tests: commits on success, rolls back on error.
    """
    sm = app.extensions["sqlalchemy_sessionmaker"]
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
