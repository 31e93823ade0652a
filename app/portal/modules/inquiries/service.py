from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.portal.audit import record_event
from app.portal.utils import clean, is_valid_email, utcnow

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session
    from app.portal.models import User
    from app.portal.modules.inquiries.models import ContactInquiry


FORM_FIELDS = ("full_name", "email_address", "phone_number", "subject", "message", "inquiry_type")

MAX_ADMIN_NOTES = 500

# Admin list filters
STATUS_FILTERS = ("active", "unread", "archived")


def payload_from_form(form: Any) -> dict:
    return {name: form.get(name) for name in FORM_FIELDS}


def validate_inquiry_payload(payload: dict) -> list[str]:
    """Validate a public contact submission. Returns list of errors."""
    errors = []
    full_name = clean(payload.get("full_name"))
    if not full_name:
        errors.append("Full name is required.")
    elif len(full_name) > 100:
        errors.append("Full name must be at most 100 characters.")

    email = clean(payload.get("email_address"))
    if not email:
        errors.append("Email address is required.")
    elif len(email) > 100 or not is_valid_email(email):
        errors.append("Email address is not valid.")

    phone = clean(payload.get("phone_number"))
    if phone and len(phone) > 20:
        errors.append("Phone number must be at most 20 characters.")

    subject = clean(payload.get("subject"))
    if not subject:
        errors.append("Subject is required.")
    elif len(subject) > 200:
        errors.append("Subject must be at most 200 characters.")

    if not clean(payload.get("message")):
        errors.append("Message is required.")

    inquiry_type = clean(payload.get("inquiry_type"))
    if inquiry_type and len(inquiry_type) > 50:
        errors.append("Inquiry type must be at most 50 characters.")
    return errors


def submit_inquiry(s: "Session", payload: dict) -> "ContactInquiry":
    """Store a public contact submission. Payload must already be validated."""
    from app.portal.modules.inquiries.models import ContactInquiry

    now = utcnow()
    inquiry = ContactInquiry(
        full_name=clean(payload.get("full_name")),
        email_address=clean(payload.get("email_address")),
        phone_number=clean(payload.get("phone_number")),
        subject=clean(payload.get("subject")),
        message=(payload.get("message") or "").strip(),
        inquiry_type=clean(payload.get("inquiry_type")) or "General",
        is_read=False,
        is_archived=False,
        created_at=now,
        last_updated=now,
    )
    s.add(inquiry)
    s.flush()

    record_event(
        s,
        actor=None,
        action="inquiry.submit",
        entity_type="ContactInquiry",
        entity_id=str(inquiry.id),
        metadata={"inquiry_type": inquiry.inquiry_type},
    )
    return inquiry


def filter_inquiries(q: "Query", status: str | None) -> "Query":
    from app.portal.modules.inquiries.models import ContactInquiry

    if status == "unread":
        return q.filter(ContactInquiry.is_read.is_(False)).filter(ContactInquiry.is_archived.is_(False))
    if status == "archived":
        return q.filter(ContactInquiry.is_archived.is_(True))
    if status == "active":
        return q.filter(ContactInquiry.is_archived.is_(False))
    return q


def mark_read(s: "Session", inquiry: "ContactInquiry", user: "User") -> bool:
    """
    Mark as read. read_date is set on the first read only.
    Returns False when the inquiry was already read (nothing changed).
    """
    if inquiry.is_read:
        return False
    now = utcnow()
    inquiry.is_read = True
    if inquiry.read_date is None:
        inquiry.read_date = now
    inquiry.last_updated = now
    record_event(s, actor=user, action="inquiry.read", entity_type="ContactInquiry", entity_id=str(inquiry.id))
    return True


def set_archived(s: "Session", inquiry: "ContactInquiry", archived: bool, user: "User") -> None:
    inquiry.is_archived = archived
    inquiry.last_updated = utcnow()
    record_event(
        s,
        actor=user,
        action="inquiry.archive" if archived else "inquiry.unarchive",
        entity_type="ContactInquiry",
        entity_id=str(inquiry.id),
    )


def update_inquiry_notes(s: "Session", inquiry: "ContactInquiry", notes: str | None, user: "User") -> None:
    notes = clean(notes)
    if notes and len(notes) > MAX_ADMIN_NOTES:
        raise ValueError(f"Admin notes must be at most {MAX_ADMIN_NOTES} characters.")
    inquiry.admin_notes = notes
    inquiry.last_updated = utcnow()
    record_event(s, actor=user, action="inquiry.notes", entity_type="ContactInquiry", entity_id=str(inquiry.id))


def delete_inquiry(s: "Session", inquiry: "ContactInquiry", user: "User") -> None:
    """Hard delete."""
    record_event(
        s,
        actor=user,
        action="inquiry.delete",
        entity_type="ContactInquiry",
        entity_id=str(inquiry.id),
        metadata={"subject": inquiry.subject},
    )
    s.delete(inquiry)
