"""
Scholarship directory query engine.

Turns optional filters, a sort key and a page number into one bounded page of
results plus pagination metadata, and looks up a single scholarship together
with its related scholarships.

Stateless: every call is a read against the session it is given. Store errors
(SQLAlchemyError) propagate to the caller untouched.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, NamedTuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from app.portal.modules.scholarships.models import Scholarship
from app.portal.utils import utcnow

logger = logging.getLogger(__name__)

PAGE_SIZE = 12
RELATED_LIMIT = 3
FEATURED_LIMIT = 6

# Ties inside any ordering fall back to the store's retrieval order (undefined);
# no secondary key is added.
SORT_ORDERINGS = {
    "amount_desc": Scholarship.amount.desc(),
    "amount_asc": Scholarship.amount.asc(),
    "deadline_desc": Scholarship.deadline.desc(),
    "country_asc": Scholarship.country.asc(),
}
DEFAULT_ORDERING = Scholarship.deadline.asc()


class ScholarshipNotFound(LookupError):
    """No active scholarship with the requested id."""

    def __init__(self, scholarship_id: Any) -> None:
        super().__init__(f"Scholarship not found: {scholarship_id!r}")
        self.scholarship_id = scholarship_id


def _normalize(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class ScholarshipFilters:
    """
    Listing filters as echoed back to the presentation layer.

    Values are trimmed on construction; blank or whitespace-only values
    become None and apply no constraint.
    """

    search: str | None = None
    country: str | None = None
    field_of_study: str | None = None
    degree_level: str | None = None
    sort: str | None = None

    def __post_init__(self) -> None:
        for name in ("search", "country", "field_of_study", "degree_level", "sort"):
            object.__setattr__(self, name, _normalize(getattr(self, name)))

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> ScholarshipFilters:
        """Build from query-string args (camelCase names, snake_case also accepted)."""
        return cls(
            search=args.get("search"),
            country=args.get("country"),
            field_of_study=args.get("fieldOfStudy") or args.get("field_of_study"),
            degree_level=args.get("degreeLevel") or args.get("degree_level"),
            sort=args.get("sort"),
        )

    @property
    def is_filtered(self) -> bool:
        return any((self.search, self.country, self.field_of_study, self.degree_level))

    def as_query_args(self) -> dict[str, str]:
        pairs = (
            ("search", self.search),
            ("country", self.country),
            ("fieldOfStudy", self.field_of_study),
            ("degreeLevel", self.degree_level),
            ("sort", self.sort),
        )
        return {k: v for k, v in pairs if v is not None}


@dataclass(frozen=True)
class PagedResult:
    items: list[Scholarship]
    total_count: int
    total_pages: int
    current_page: int
    filters: ScholarshipFilters
    page_size: int = PAGE_SIZE

    @property
    def prev_page(self) -> int:
        """Previous page that has items (the last page when past the end)."""
        return min(self.current_page - 1, self.total_pages)

    @property
    def has_prev(self) -> bool:
        return self.prev_page >= 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def first_index(self) -> int:
        """1-based position of the first item on this page (0 when empty)."""
        if not self.items:
            return 0
        return (self.current_page - 1) * self.page_size + 1

    @property
    def last_index(self) -> int:
        if not self.items:
            return 0
        return self.first_index + len(self.items) - 1

    def page_args(self, page: int) -> dict[str, Any]:
        """Query args for a link to `page` that keeps the active filters."""
        args: dict[str, Any] = dict(self.filters.as_query_args())
        args["page"] = page
        return args


class ScholarshipDetail(NamedTuple):
    scholarship: Scholarship
    related: list[Scholarship]


# ---------- Filter composition ----------
Predicate = Callable[[ScholarshipFilters, datetime], "ColumnElement[bool] | None"]


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _listing_eligible(f: ScholarshipFilters, now: datetime) -> ColumnElement[bool]:
    return and_(Scholarship.is_active.is_(True), Scholarship.deadline >= now)


def _search(f: ScholarshipFilters, now: datetime) -> ColumnElement[bool] | None:
    if not f.search:
        return None
    like = _like_pattern(f.search)
    return or_(
        Scholarship.title.ilike(like, escape="\\"),
        Scholarship.description.ilike(like, escape="\\"),
        Scholarship.country.ilike(like, escape="\\"),
        Scholarship.field_of_study.ilike(like, escape="\\"),
    )


def _country(f: ScholarshipFilters, now: datetime) -> ColumnElement[bool] | None:
    return Scholarship.country == f.country if f.country else None


def _field_of_study(f: ScholarshipFilters, now: datetime) -> ColumnElement[bool] | None:
    return Scholarship.field_of_study == f.field_of_study if f.field_of_study else None


def _degree_level(f: ScholarshipFilters, now: datetime) -> ColumnElement[bool] | None:
    return Scholarship.degree_level == f.degree_level if f.degree_level else None


LISTING_PREDICATES: tuple[Predicate, ...] = (
    _listing_eligible,
    _search,
    _country,
    _field_of_study,
    _degree_level,
)


def build_listing_clauses(filters: ScholarshipFilters, now: datetime) -> list[ColumnElement[bool]]:
    """Evaluate each predicate in order; inactive filters contribute nothing."""
    clauses = []
    for predicate in LISTING_PREDICATES:
        clause = predicate(filters, now)
        if clause is not None:
            clauses.append(clause)
    return clauses


# ---------- Sort dispatch ----------
def resolve_ordering(sort: str | None):
    return SORT_ORDERINGS.get(sort or "", DEFAULT_ORDERING)


# ---------- Pagination ----------
def clamp_page(raw: Any) -> int:
    """Page numbers below 1, and anything non-numeric, become 1."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


def count_pages(total_count: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total_count / page_size)


# ---------- Public operations ----------
def is_listing_eligible(scholarship: Scholarship, now: datetime | None = None) -> bool:
    return bool(scholarship.is_active) and scholarship.is_open(now)


def list_scholarships(
    s: Session,
    filters: ScholarshipFilters | None = None,
    page: Any = 1,
    *,
    now: datetime | None = None,
) -> PagedResult:
    filters = filters or ScholarshipFilters()
    now = now or utcnow()
    page = clamp_page(page)

    q = s.query(Scholarship).filter(and_(*build_listing_clauses(filters, now)))
    total_count = q.count()
    offset = (page - 1) * PAGE_SIZE
    # Past the last row: no slice query (huge offsets overflow the driver).
    if offset >= total_count:
        items = []
    else:
        items = q.order_by(resolve_ordering(filters.sort)).offset(offset).limit(PAGE_SIZE).all()

    logger.debug(
        "Scholarship listing filters=%s page=%s total=%s returned=%s",
        filters.as_query_args(),
        page,
        total_count,
        len(items),
    )
    return PagedResult(
        items=items,
        total_count=total_count,
        total_pages=count_pages(total_count),
        current_page=page,
        filters=filters,
    )


def find_related(s: Session, scholarship: Scholarship, limit: int = RELATED_LIMIT) -> list[Scholarship]:
    """
    Other active scholarships sharing the country or the field of study,
    nearest deadline first. No deadline filter: expired ones can appear here.
    """
    return (
        s.query(Scholarship)
        .filter(Scholarship.is_active.is_(True))
        .filter(Scholarship.id != scholarship.id)
        .filter(
            or_(
                Scholarship.country == scholarship.country,
                Scholarship.field_of_study == scholarship.field_of_study,
            )
        )
        .order_by(Scholarship.deadline.asc())
        .limit(limit)
        .all()
    )


def get_scholarship_detail(s: Session, scholarship_id: int | None) -> ScholarshipDetail:
    """
    Active scholarship by id plus related items. Expired scholarships are
    still returned here; only the listing hides them.
    """
    if scholarship_id is None:
        raise ScholarshipNotFound(scholarship_id)
    scholarship = (
        s.query(Scholarship)
        .filter(Scholarship.id == scholarship_id)
        .filter(Scholarship.is_active.is_(True))
        .one_or_none()
    )
    if scholarship is None:
        raise ScholarshipNotFound(scholarship_id)
    return ScholarshipDetail(scholarship=scholarship, related=find_related(s, scholarship))


def list_featured_scholarships(
    s: Session,
    limit: int = FEATURED_LIMIT,
    *,
    now: datetime | None = None,
) -> list[Scholarship]:
    """Home page selection: featured first, then soonest deadline."""
    now = now or utcnow()
    return (
        s.query(Scholarship)
        .filter(_listing_eligible(ScholarshipFilters(), now))
        .order_by(Scholarship.is_featured.desc(), Scholarship.deadline.asc())
        .limit(limit)
        .all()
    )
