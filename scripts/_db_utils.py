from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker


@contextmanager
def script_session(db_url: str) -> Generator[Session, None, None]:
    """Standalone session for scripts that run without the Flask app."""
    engine = create_engine(db_url, pool_pre_ping=True)
    sm = sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False)
    s: Session = sm()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()
