"""
Append-only audit trail.

Every admin mutation (and every login, failed or not) writes one AuditEvent
in the same transaction as the change it describes.
"""
import json
from decimal import Decimal
from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.portal.models import AuditEvent, User


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def apply_changes(entity: Any, values: dict[str, Any], *, opaque: tuple[str, ...] = ()) -> dict[str, Any]:
    """
    Set `values` on `entity` and return the diff for the audit metadata.

    Fields named in `opaque` are recorded as changed (True) without their content.
    """
    changes: dict[str, Any] = {}
    for key, new in values.items():
        old = getattr(entity, key)
        if old == new:
            continue
        changes[key] = True if key in opaque else {"old": _jsonable(old), "new": _jsonable(new)}
        setattr(entity, key, new)
    return changes


def record_event(
    s: Session,
    *,
    actor: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    reason: str | None = None,
    metadata: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    in_request = has_request_context()
    ev = AuditEvent(
        request_id=request_id or (getattr(g, "request_id", None) if in_request else None),
        client_ip=request.remote_addr if in_request else None,
        actor_user_id=actor.id if actor else None,
        actor_user_email=actor.email if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
        metadata_json=json.dumps(metadata, sort_keys=True, default=str) if metadata else None,
    )
    s.add(ev)
    return ev
