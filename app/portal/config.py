import os
from dataclasses import dataclass
from datetime import timedelta

from app.portal.constants import FILTER_OPTIONS


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    log_level: str
    session_hours: int

    @property
    def is_production(self) -> bool:
        return self.env in ("prod", "production")


def _env(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        raise RuntimeError(f"{name} must be an integer (got {raw!r}).") from None


def load_settings() -> Settings:
    return Settings(
        secret_key=_env("SECRET_KEY", "change-me"),
        env=_env("ENV", "development").lower(),
        database_url=_env("DATABASE_URL", "sqlite:///portal.db"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        session_hours=_env_int("SESSION_HOURS", 8),
    )


def load_config() -> dict:
    """Flask config mapping for create_app()."""
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        # Listing filter dropdowns; the query engine accepts any value.
        "SCHOLARSHIP_FILTER_OPTIONS": FILTER_OPTIONS,
        # Staff sessions
        "PERMANENT_SESSION_LIFETIME": timedelta(hours=s.session_hours),
        "SESSION_REFRESH_EACH_REQUEST": True,
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": s.is_production,
        # Contact and admin forms only; nothing is uploaded.
        "MAX_CONTENT_LENGTH": 1 * 1024 * 1024,
    }
