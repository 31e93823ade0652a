"""
Release phase: bring the schema to head, then seed (idempotent).

Requires DATABASE_URL; production refuses SQLite. Seeding never overwrites an
existing admin password.

Usage:
  python scripts/release.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402


def _database_url() -> str:
    db_url = (os.environ.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("Missing required environment variable DATABASE_URL.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("Refusing to run release on sqlite DATABASE_URL in production.")
    return db_url


def alembic_config(db_url: str) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def migrate(db_url: str) -> None:
    command.upgrade(alembic_config(db_url), "head")


def run_release() -> None:
    db_url = _database_url()
    from scripts import init_db

    print("Release: migrating schema to head", flush=True)
    migrate(db_url)
    print("Release: seeding permissions, admin and sample content", flush=True)
    init_db.seed_only(database_url=db_url)
    print("Release: done", flush=True)


if __name__ == "__main__":
    run_release()
