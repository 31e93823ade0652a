from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from app.portal.audit import apply_changes, record_event
from app.portal.utils import clean, parse_bool, utcnow

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.portal.models import User
    from app.portal.modules.pages.models import Page


SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

# First path segments already owned by other routes.
RESERVED_SLUGS = frozenset({"admin", "auth", "contact", "scholarships", "static", "health", "healthz", "privacy"})

FORM_FIELDS = ("slug", "title", "hero_image_url", "content_html", "is_published", "seo_description")


def payload_from_form(form: Any) -> dict:
    return {name: form.get(name) for name in FORM_FIELDS}


def normalize_slug(slug: str | None) -> str:
    return (slug or "").strip().lower()


def validate_page_payload(s: "Session", payload: dict, page_id: int | None = None) -> list[str]:
    """Validate page creation/update payload. Returns list of errors."""
    from app.portal.modules.pages.models import Page

    errors = []
    slug = normalize_slug(payload.get("slug"))
    if not slug:
        errors.append("Slug is required.")
    elif len(slug) > 200:
        errors.append("Slug must be at most 200 characters.")
    elif not SLUG_RE.match(slug):
        errors.append("Slug may contain only lowercase letters, digits and single hyphens.")
    elif slug in RESERVED_SLUGS:
        errors.append(f"Slug '{slug}' is reserved.")
    else:
        q = s.query(Page.id).filter(Page.slug == slug)
        if page_id is not None:
            q = q.filter(Page.id != page_id)
        if q.first() is not None:
            errors.append(f"Slug '{slug}' is already in use.")

    title = clean(payload.get("title"))
    if not title:
        errors.append("Title is required.")
    elif len(title) > 500:
        errors.append("Title must be at most 500 characters.")

    if not clean(payload.get("content_html")):
        errors.append("Content is required.")

    hero = clean(payload.get("hero_image_url"))
    if hero and len(hero) > 1000:
        errors.append("Hero image URL must be at most 1000 characters.")

    seo = clean(payload.get("seo_description"))
    if seo and len(seo) > 500:
        errors.append("SEO description must be at most 500 characters.")
    return errors


def _normalized(payload: dict) -> dict:
    return {
        "slug": normalize_slug(payload.get("slug")),
        "title": clean(payload.get("title")),
        "hero_image_url": clean(payload.get("hero_image_url")),
        # Markup is kept verbatim.
        "content_html": payload.get("content_html") or "",
        "is_published": parse_bool(payload.get("is_published")),
        "seo_description": clean(payload.get("seo_description")),
    }


def create_page(s: "Session", payload: dict, user: "User") -> "Page":
    from app.portal.modules.pages.models import Page

    now = utcnow()
    page = Page(**_normalized(payload), created_at=now, last_updated=now)
    s.add(page)
    s.flush()

    record_event(
        s,
        actor=user,
        action="page.create",
        entity_type="Page",
        entity_id=str(page.id),
        metadata={"slug": page.slug, "is_published": page.is_published},
    )
    return page


def update_page(s: "Session", page: "Page", payload: dict, user: "User") -> "Page":
    # Content bodies are large; the audit entry only notes that they changed.
    changes = apply_changes(page, _normalized(payload), opaque=("content_html",))
    page.last_updated = utcnow()
    s.flush()

    record_event(
        s,
        actor=user,
        action="page.edit",
        entity_type="Page",
        entity_id=str(page.id),
        metadata={"slug": page.slug, "changes": changes},
    )
    return page


def delete_page(s: "Session", page: "Page", user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="page.delete",
        entity_type="Page",
        entity_id=str(page.id),
        metadata={"slug": page.slug},
    )
    s.delete(page)


def get_published_page(s: "Session", slug: str | None) -> "Page | None":
    from app.portal.modules.pages.models import Page

    slug = normalize_slug(slug)
    if not slug:
        return None
    return s.query(Page).filter(Page.slug == slug).filter(Page.is_published.is_(True)).one_or_none()
