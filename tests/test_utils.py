from datetime import datetime
from decimal import Decimal

import pytest

from app.portal.utils import clean, is_local_redirect, is_valid_email, parse_bool, parse_datetime, parse_decimal


def test_parse_datetime_bare_date_is_end_of_day():
    assert parse_datetime("2026-05-31") == datetime(2026, 5, 31, 23, 59, 59)


def test_parse_datetime_local_input():
    assert parse_datetime("2026-05-31T08:30") == datetime(2026, 5, 31, 8, 30)


def test_parse_datetime_offset_is_converted_to_utc():
    assert parse_datetime("2026-05-31T10:00:00+02:00") == datetime(2026, 5, 31, 8, 0)


def test_parse_datetime_blank_and_invalid():
    assert parse_datetime(None) is None
    assert parse_datetime("   ") is None
    with pytest.raises(ValueError):
        parse_datetime("31/05/2026")


def test_parse_decimal():
    assert parse_decimal("12,500.75") == Decimal("12500.75")
    assert parse_decimal("") is None
    with pytest.raises(ValueError):
        parse_decimal("ten")


def test_small_helpers():
    assert clean("  x ") == "x"
    assert clean("   ") is None
    assert parse_bool("on") is True
    assert parse_bool(None) is False
    assert is_valid_email("a@b.co")
    assert not is_valid_email("a@b")
    assert is_local_redirect("/admin/")
    assert not is_local_redirect("//evil.example.com")
    assert not is_local_redirect("https://evil.example.com")
