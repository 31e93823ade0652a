#!/usr/bin/env python3
"""
Production entry point: migrate + seed, then hand the process over to gunicorn.

Env:
  PORT             listen port (default 8080)
  WEB_CONCURRENCY  gunicorn workers (default 2)

Usage:
    python scripts/start.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

DEFAULT_PORT = 8080
DEFAULT_WORKERS = 2


def _int_from_env(name: str, default: int, *, low: int, high: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise SystemExit(f"ERROR: {name}={raw!r} is not an integer.") from None
    if not low <= value <= high:
        raise SystemExit(f"ERROR: {name}={value} is outside {low}-{high}.")
    return value


def gunicorn_argv(port: int, workers: int) -> list[str]:
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", str(workers),
        "--timeout", "60",
        "--preload",
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def main() -> None:
    port = _int_from_env("PORT", DEFAULT_PORT, low=1, high=65535)
    workers = _int_from_env("WEB_CONCURRENCY", DEFAULT_WORKERS, low=1, high=64)

    from scripts.release import run_release

    try:
        run_release()
    except Exception as e:
        print(f"Release failed, not starting web server: {e}", flush=True)
        sys.exit(1)

    argv = gunicorn_argv(port, workers)
    print(f"Starting: {' '.join(argv)}", flush=True)
    os.execvp(argv[0], argv)


if __name__ == "__main__":
    main()
