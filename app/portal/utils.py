from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def utcnow() -> datetime:
    """Naive UTC timestamp; all DateTime columns store naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def clean(value: str | None) -> str | None:
    """Strip a form value; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "on", "yes")


def parse_datetime(s: str | None) -> datetime | None:
    """
    Parse HTML date/datetime-local input (YYYY-MM-DD or YYYY-MM-DDTHH:MM[:SS]).
    A bare date means end of that day, so a deadline stays open all day.
    Raises ValueError on malformed input.
    """
    if not s:
        return None
    s = s.strip()
    if not s:
        return None
    if len(s) == 10:
        return datetime.combine(date.fromisoformat(s), time(23, 59, 59))
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_decimal(s: str | None) -> Decimal | None:
    if s is None:
        return None
    s = s.strip().replace(",", "")
    if not s:
        return None
    try:
        return Decimal(s)
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {s!r}") from e


def is_valid_email(value: str | None) -> bool:
    return bool(value and EMAIL_RE.match(value.strip()))


def is_local_redirect(target: str | None) -> bool:
    return bool(target) and target.startswith("/") and not target.startswith("//")
