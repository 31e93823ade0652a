from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.portal.audit import apply_changes, record_event
from app.portal.constants import DEFAULT_CURRENCY
from app.portal.utils import clean, parse_bool, parse_datetime, parse_decimal, utcnow

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.portal.models import User
    from app.portal.modules.scholarships.models import Scholarship


REQUIRED_FIELDS = (
    ("title", "Title"),
    ("description", "Description"),
    ("country", "Country"),
    ("field_of_study", "Field of study"),
    ("degree_level", "Degree level"),
    ("deadline", "Deadline"),
    ("amount", "Amount"),
    ("eligibility", "Eligibility"),
    ("required_documents", "Required documents"),
)

MAX_LENGTHS = {
    "title": 200,
    "country": 100,
    "field_of_study": 100,
    "degree_level": 50,
    "currency": 10,
    "application_url": 500,
    "official_website": 500,
    "additional_info": 1000,
    "admin_notes": 1000,
}

TEXT_FIELDS = (
    "title",
    "description",
    "country",
    "field_of_study",
    "degree_level",
    "eligibility",
    "required_documents",
    "application_url",
    "official_website",
    "additional_info",
    "admin_notes",
)

FORM_FIELDS = TEXT_FIELDS + ("deadline", "amount", "currency", "is_active", "is_featured")


def payload_from_form(form: Any) -> dict:
    return {name: form.get(name) for name in FORM_FIELDS}


def validate_scholarship_payload(payload: dict) -> list[str]:
    """Validate scholarship creation/update payload. Returns list of errors."""
    errors = []
    for key, label in REQUIRED_FIELDS:
        if not clean(payload.get(key)):
            errors.append(f"{label} is required.")

    for key, limit in MAX_LENGTHS.items():
        value = clean(payload.get(key))
        if value and len(value) > limit:
            errors.append(f"{key.replace('_', ' ').capitalize()} must be at most {limit} characters.")

    if clean(payload.get("deadline")):
        try:
            parse_datetime(payload.get("deadline"))
        except ValueError:
            errors.append("Deadline must be a date (YYYY-MM-DD) or date and time.")

    if clean(payload.get("amount")):
        try:
            amount = parse_decimal(payload.get("amount"))
        except ValueError:
            errors.append("Amount must be a number.")
        else:
            if amount is not None and (not amount.is_finite() or amount < 0):
                errors.append("Amount must be zero or greater.")

    for key in ("application_url", "official_website"):
        url = clean(payload.get(key))
        if url and not url.lower().startswith(("http://", "https://")):
            errors.append(f"{key.replace('_', ' ').capitalize()} must start with http:// or https://.")
    return errors


def _normalized(payload: dict) -> dict:
    values: dict[str, Any] = {key: clean(payload.get(key)) for key in TEXT_FIELDS}
    values["deadline"] = parse_datetime(payload.get("deadline"))
    values["amount"] = parse_decimal(payload.get("amount"))
    values["currency"] = (clean(payload.get("currency")) or DEFAULT_CURRENCY).upper()
    values["is_active"] = parse_bool(payload.get("is_active"))
    values["is_featured"] = parse_bool(payload.get("is_featured"))
    return values


def create_scholarship(s: "Session", payload: dict, user: "User") -> "Scholarship":
    """Create a new scholarship. Payload must already be validated."""
    from app.portal.modules.scholarships.models import Scholarship

    now = utcnow()
    scholarship = Scholarship(**_normalized(payload), created_at=now, last_updated=now)
    s.add(scholarship)
    s.flush()

    record_event(
        s,
        actor=user,
        action="scholarship.create",
        entity_type="Scholarship",
        entity_id=str(scholarship.id),
        metadata={"title": scholarship.title, "country": scholarship.country, "is_active": scholarship.is_active},
    )
    return scholarship


def update_scholarship(s: "Session", scholarship: "Scholarship", payload: dict, user: "User") -> "Scholarship":
    """Update an existing scholarship. Payload must already be validated."""
    changes = apply_changes(scholarship, _normalized(payload))
    scholarship.last_updated = utcnow()

    record_event(
        s,
        actor=user,
        action="scholarship.edit",
        entity_type="Scholarship",
        entity_id=str(scholarship.id),
        metadata={"title": scholarship.title, "changes": changes},
    )
    return scholarship


def update_scholarship_notes(s: "Session", scholarship: "Scholarship", notes: str | None, user: "User") -> "Scholarship":
    notes = clean(notes)
    if notes and len(notes) > MAX_LENGTHS["admin_notes"]:
        raise ValueError(f"Admin notes must be at most {MAX_LENGTHS['admin_notes']} characters.")
    scholarship.admin_notes = notes
    scholarship.last_updated = utcnow()
    record_event(
        s,
        actor=user,
        action="scholarship.notes",
        entity_type="Scholarship",
        entity_id=str(scholarship.id),
    )
    return scholarship


def delete_scholarship(s: "Session", scholarship: "Scholarship", user: "User") -> None:
    """Hard delete."""
    record_event(
        s,
        actor=user,
        action="scholarship.delete",
        entity_type="Scholarship",
        entity_id=str(scholarship.id),
        metadata={"title": scholarship.title},
    )
    s.delete(scholarship)
