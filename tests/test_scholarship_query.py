"""Tests for the scholarship directory query engine (filter, sort, paginate, detail)."""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.portal import create_app
from app.portal.db import session_scope
from app.portal.models import Base
from app.portal.modules.scholarships.models import Scholarship
from app.portal.modules.scholarships.query import (
    PAGE_SIZE,
    ScholarshipFilters,
    ScholarshipNotFound,
    clamp_page,
    count_pages,
    get_scholarship_detail,
    is_listing_eligible,
    list_featured_scholarships,
    list_scholarships,
)

NOW = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)
    return app


def _make(s, **overrides) -> Scholarship:
    values = {
        "title": "General Scholarship",
        "description": "Funding for students.",
        "country": "GERMANY",
        "field_of_study": "ENGINEERING",
        "degree_level": "MASTER'S DEGREE",
        "deadline": NOW + timedelta(days=30),
        "amount": Decimal("1000.00"),
        "currency": "USD",
        "eligibility": "Anyone",
        "required_documents": "Transcript",
        "is_active": True,
    }
    values.update(overrides)
    sch = Scholarship(**values)
    s.add(sch)
    s.flush()
    return sch


def _seed_many(s, n: int):
    for i in range(n):
        _make(s, title=f"Scholarship {i:02d}", deadline=NOW + timedelta(days=i + 1), amount=Decimal(1000 + i))


# ---------- Pagination ----------
def test_fifteen_records_split_into_two_pages(app):
    with session_scope(app) as s:
        _seed_many(s, 15)

        first = list_scholarships(s, page=1, now=NOW)
        assert first.total_count == 15
        assert first.total_pages == 2
        assert first.current_page == 1
        assert len(first.items) == PAGE_SIZE
        assert first.has_next and not first.has_prev

        second = list_scholarships(s, page=2, now=NOW)
        assert len(second.items) == 3
        assert second.first_index == 13
        assert second.last_index == 15
        assert not second.has_next

        # pages are disjoint and together cover the whole match set
        ids = {x.id for x in first.items} | {x.id for x in second.items}
        assert len(ids) == 15


def test_page_beyond_last_is_empty_but_keeps_totals(app):
    with session_scope(app) as s:
        _seed_many(s, 15)
        result = list_scholarships(s, page=5, now=NOW)
        assert result.items == []
        assert result.total_count == 15
        assert result.total_pages == 2
        assert result.current_page == 5


def test_huge_page_number_is_empty_not_an_error(app):
    with session_scope(app) as s:
        _seed_many(s, 15)
        result = list_scholarships(s, page="99999999999999999999", now=NOW)
        assert result.items == []
        assert result.total_count == 15
        assert result.total_pages == 2
        assert result.current_page == 10**20 - 1
        assert result.prev_page == 2


def test_prev_page_points_back_into_range(app):
    with session_scope(app) as s:
        _seed_many(s, 15)
        assert list_scholarships(s, page=5, now=NOW).prev_page == 2
        assert list_scholarships(s, page=2, now=NOW).prev_page == 1
        assert not list_scholarships(s, page=1, now=NOW).has_prev


def test_empty_directory(app):
    with session_scope(app) as s:
        result = list_scholarships(s, now=NOW)
        assert result.items == []
        assert result.total_count == 0
        assert result.total_pages == 0
        assert result.first_index == 0


@pytest.mark.parametrize(
    "raw,expected",
    [(None, 1), ("", 1), ("abc", 1), ("0", 1), (-3, 1), ("1", 1), ("4", 4), (7, 7)],
)
def test_clamp_page(raw, expected):
    assert clamp_page(raw) == expected


def test_count_pages():
    assert count_pages(0) == 0
    assert count_pages(12) == 1
    assert count_pages(13) == 2
    assert count_pages(25) == 3


def test_non_positive_page_is_served_as_first(app):
    with session_scope(app) as s:
        _seed_many(s, 3)
        result = list_scholarships(s, page=-1, now=NOW)
        assert result.current_page == 1
        assert len(result.items) == 3


# ---------- Eligibility ----------
def test_listing_hides_inactive_and_expired(app):
    with session_scope(app) as s:
        _make(s, title="Open")
        _make(s, title="Closed", deadline=NOW - timedelta(days=1))
        _make(s, title="Hidden", is_active=False)
        _make(s, title="Due now", deadline=NOW)

        titles = {x.title for x in list_scholarships(s, now=NOW).items}
        assert titles == {"Open", "Due now"}


def test_deadline_one_second_past_is_unlisted_but_has_detail(app):
    with session_scope(app) as s:
        just_closed = _make(s, title="Just closed", deadline=NOW - timedelta(seconds=1))
        _make(s, title="Closes now", deadline=NOW)

        titles = [x.title for x in list_scholarships(s, now=NOW).items]
        assert titles == ["Closes now"]
        assert get_scholarship_detail(s, just_closed.id).scholarship.title == "Just closed"
        assert not is_listing_eligible(just_closed, NOW)


def test_expired_scholarship_still_available_by_detail(app):
    with session_scope(app) as s:
        expired = _make(s, title="Expired", deadline=NOW - timedelta(days=10))
        detail = get_scholarship_detail(s, expired.id)
        assert detail.scholarship.id == expired.id
        assert not is_listing_eligible(detail.scholarship, NOW)


# ---------- Filters ----------
def test_search_matches_title_description_country_field(app):
    with session_scope(app) as s:
        _make(s, title="Engineering Excellence Award", field_of_study="BUSINESS")
        _make(s, title="Plain", description="For future engineering leaders", field_of_study="BUSINESS")
        _make(s, title="By field", field_of_study="ENGINEERING")
        _make(s, title="By country", country="ENGINEERINGLAND", field_of_study="ARTS")
        _make(s, title="Unrelated", field_of_study="ARTS")

        result = list_scholarships(s, ScholarshipFilters(search="Engineering"), now=NOW)
        assert {x.title for x in result.items} == {"Engineering Excellence Award", "Plain", "By field", "By country"}


def test_search_treats_like_wildcards_literally(app):
    with session_scope(app) as s:
        _make(s, title="100% tuition")
        _make(s, title="1000 dollars")
        result = list_scholarships(s, ScholarshipFilters(search="100%"), now=NOW)
        assert [x.title for x in result.items] == ["100% tuition"]


def test_filters_combine_conjunctively(app):
    with session_scope(app) as s:
        _make(s, title="A", country="USA", field_of_study="MEDICINE", degree_level="PHD")
        _make(s, title="B", country="USA", field_of_study="MEDICINE", degree_level="BACHELOR'S DEGREE")
        _make(s, title="C", country="USA", field_of_study="LAW", degree_level="PHD")
        _make(s, title="D", country="CANADA", field_of_study="MEDICINE", degree_level="PHD")

        f = ScholarshipFilters(country="USA", field_of_study="MEDICINE", degree_level="PHD")
        result = list_scholarships(s, f, now=NOW)
        assert [x.title for x in result.items] == ["A"]
        assert result.total_count == 1


def test_whitespace_filters_are_ignored(app):
    with session_scope(app) as s:
        _seed_many(s, 4)
        f = ScholarshipFilters(search="   ", country=" ", field_of_study="", degree_level=None)
        assert f.search is None and f.country is None
        assert not f.is_filtered
        assert list_scholarships(s, f, now=NOW).total_count == 4


def test_filters_from_query_args():
    f = ScholarshipFilters.from_args(
        {"search": "  med ", "country": "USA", "fieldOfStudy": "MEDICINE", "degree_level": "PHD", "sort": "amount_desc"}
    )
    assert f.search == "med"
    assert f.field_of_study == "MEDICINE"
    assert f.degree_level == "PHD"
    assert f.as_query_args() == {
        "search": "med",
        "country": "USA",
        "fieldOfStudy": "MEDICINE",
        "degreeLevel": "PHD",
        "sort": "amount_desc",
    }


def test_result_echoes_filters(app):
    with session_scope(app) as s:
        f = ScholarshipFilters(country="USA", sort="amount_asc")
        result = list_scholarships(s, f, page=2, now=NOW)
        assert result.filters == f
        assert result.page_args(3) == {"country": "USA", "sort": "amount_asc", "page": 3}


# ---------- Sorting ----------
def test_default_sort_is_soonest_deadline(app):
    with session_scope(app) as s:
        _make(s, title="Later", deadline=NOW + timedelta(days=20))
        _make(s, title="Soon", deadline=NOW + timedelta(days=2))
        _make(s, title="Middle", deadline=NOW + timedelta(days=10))
        titles = [x.title for x in list_scholarships(s, now=NOW).items]
        assert titles == ["Soon", "Middle", "Later"]


@pytest.mark.parametrize(
    "sort,expected",
    [
        ("amount_desc", ["Big", "Mid", "Small"]),
        ("amount_asc", ["Small", "Mid", "Big"]),
        ("deadline_desc", ["Mid", "Small", "Big"]),
        ("country_asc", ["Small", "Big", "Mid"]),
        ("bogus", ["Big", "Small", "Mid"]),
        (None, ["Big", "Small", "Mid"]),
    ],
)
def test_sort_keys(app, sort, expected):
    with session_scope(app) as s:
        _make(s, title="Big", amount=Decimal("50000"), deadline=NOW + timedelta(days=1), country="FRANCE")
        _make(s, title="Small", amount=Decimal("500"), deadline=NOW + timedelta(days=5), country="AUSTRALIA")
        _make(s, title="Mid", amount=Decimal("5000"), deadline=NOW + timedelta(days=9), country="USA")
        result = list_scholarships(s, ScholarshipFilters(sort=sort), now=NOW)
        assert [x.title for x in result.items] == expected


# ---------- Detail + related ----------
def test_detail_returns_related_sharing_country_or_field(app):
    with session_scope(app) as s:
        target = _make(s, title="Target", country="JAPAN", field_of_study="LAW")
        _make(s, title="Same country", country="JAPAN", field_of_study="ARTS", deadline=NOW + timedelta(days=3))
        _make(s, title="Same field", country="KENYA", field_of_study="LAW", deadline=NOW + timedelta(days=4))
        _make(s, title="Expired match", country="JAPAN", field_of_study="ARTS", deadline=NOW - timedelta(days=1))
        _make(s, title="Inactive match", country="JAPAN", is_active=False)
        _make(s, title="Unrelated", country="KENYA", field_of_study="ARTS")

        detail = get_scholarship_detail(s, target.id)
        titles = [x.title for x in detail.related]
        assert detail.scholarship.title == "Target"
        assert "Target" not in titles
        assert "Unrelated" not in titles
        assert "Inactive match" not in titles
        # nearest deadline first; expired items are not filtered out here
        assert titles == ["Expired match", "Same country", "Same field"]


def test_related_is_capped_at_three(app):
    with session_scope(app) as s:
        target = _make(s, title="Target")
        for i in range(6):
            _make(s, title=f"Peer {i}", deadline=NOW + timedelta(days=i + 1))
        detail = get_scholarship_detail(s, target.id)
        assert [x.title for x in detail.related] == ["Peer 0", "Peer 1", "Peer 2"]


def test_related_can_be_empty(app):
    with session_scope(app) as s:
        target = _make(s, title="Alone")
        assert get_scholarship_detail(s, target.id).related == []


def test_detail_not_found_cases(app):
    with session_scope(app) as s:
        inactive = _make(s, title="Inactive", is_active=False)
        with pytest.raises(ScholarshipNotFound):
            get_scholarship_detail(s, inactive.id)
        with pytest.raises(ScholarshipNotFound):
            get_scholarship_detail(s, 99999)
        with pytest.raises(ScholarshipNotFound):
            get_scholarship_detail(s, None)


# ---------- Featured ----------
def test_featured_first_then_deadline(app):
    with session_scope(app) as s:
        _make(s, title="Plain soon", deadline=NOW + timedelta(days=1))
        _make(s, title="Featured late", deadline=NOW + timedelta(days=40), is_featured=True)
        _make(s, title="Featured expired", deadline=NOW - timedelta(days=1), is_featured=True)
        _make(s, title="Plain late", deadline=NOW + timedelta(days=50))

        titles = [x.title for x in list_featured_scholarships(s, now=NOW)]
        assert titles == ["Featured late", "Plain soon", "Plain late"]
        assert len(list_featured_scholarships(s, limit=1, now=NOW)) == 1
