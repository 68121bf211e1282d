# Overview: Service-layer operations for the activity log.

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..extensions import db
from ..models import AuditLog
from ..repositories import LogStore
"""
Activity Log Invariants (authoritative)

- Append-only: no updates or deletes of existing entries.
- No domain/business logic in the log itself.
- Entries are written inside the same DB transaction as the change they
  record; the caller commits.
- Listing is newest first.
"""


def append_log(
    *,
    action: str,
    details: str,
    user: str | None,
    timestamp: Optional[datetime] = None,
) -> AuditLog:
    """
    Append one activity entry.

    - action: short label ("Recorded Sale", "Added Inventory", ...)
    - user: operator name; anonymous actions are recorded as "system"
    """
    entry = AuditLog(
        action=action,
        details=details or "",
        user=(user or "").strip() or "system",
    )
    if timestamp is not None:
        entry.timestamp = timestamp
    db.session.add(entry)
    db.session.flush()  # ensures entry.id is assigned without committing
    return entry


def list_logs(*, limit: int | None = None, since: datetime | None = None) -> dict:
    store = LogStore()
    if since is not None:
        entries = list(reversed(store.changed_since(since)))
    else:
        entries = store.recent(limit)
    return {
        "items": [e.to_dict() for e in entries],
        "count": len(entries),
    }
