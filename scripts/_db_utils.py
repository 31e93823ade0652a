"""Database access for the maintenance scripts (no Flask app needed)."""
from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

from app.portal.db import build_engine, build_sessionmaker


def default_database_url() -> str:
    return (os.environ.get("DATABASE_URL") or "sqlite:///portal.db").strip()


@contextmanager
def script_session(db_url: str | None = None) -> Iterator[Session]:
    """One unit of work against `db_url`; the engine is disposed afterwards."""
    engine = build_engine(db_url or default_database_url())
    s: Session = build_sessionmaker(engine)()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()
