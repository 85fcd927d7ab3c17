from __future__ import annotations

import json
from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.jokes.models import AuditEvent, User


def _request_origin() -> tuple[str | None, str | None]:
    if not has_request_context():
        return None, None
    return getattr(g, "request_id", None), request.remote_addr


def record_event(
    s: Session,
    *,
    actor: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditEvent:
    """Add an AuditEvent to `s`; committing is left to the caller."""
    request_id, client_ip = _request_origin()
    event = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        actor_user_id=None if actor is None else actor.id,
        actor_username=None if actor is None else actor.username,
        request_id=request_id,
        client_ip=client_ip,
        metadata_json=json.dumps(metadata, sort_keys=True) if metadata else None,
    )
    s.add(event)
    return event
