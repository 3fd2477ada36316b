# File: app/services/timeline.py
"""Append-only audit trail for issues.

append() only stages the row; it is committed together with the mutation it
describes, so a failed audit write rolls the mutation back as well.
"""
from sqlalchemy.orm import Session

from app.core.errors import ValidationFailed
from app.models.timeline import TimelineEntry


def append(db: Session, issue_id, status: str, message: str, actor_email: str) -> TimelineEntry:
    if issue_id is None or str(issue_id) == "":
        raise ValidationFailed("Timeline entry needs an issue id")
    if not status or not message or not actor_email:
        raise ValidationFailed("Timeline entry needs status, message and actor")
    entry = TimelineEntry(
        issue_id=str(issue_id),
        status=status,
        message=message,
        updated_by=actor_email,
    )
    db.add(entry)
    return entry


def list_for_issue(db: Session, issue_id: str) -> list[TimelineEntry]:
    return (
        db.query(TimelineEntry)
        .filter(TimelineEntry.issue_id == str(issue_id))
        .order_by(TimelineEntry.time.desc(), TimelineEntry.id.desc())
        .all()
    )
