# File: app/services/stats.py
"""
Read-only dashboard rollups.

Each function issues several independent queries; the numbers in one response
are not a consistent snapshot.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.issue import Issue, IssuePriority, IssueStatus
from app.models.payment import Payment, PaymentPurpose
from app.models.timeline import TimelineEntry
from app.models.user import User, UserRole

TOP_N = 10
LATEST_RESOLVED_N = 6


def _count_by(db: Session, column, keys, *filters) -> dict[str, int]:
    out = {k.value: 0 for k in keys}
    q = db.query(column, func.count()).filter(*filters).group_by(column)
    for key, n in q.all():
        out[key.value if hasattr(key, "value") else str(key)] = n
    return out


def _issue_summary(issue: Issue) -> dict:
    return {
        "id": issue.id,
        "title": issue.title,
        "category": issue.category,
        "location": issue.location,
        "reporter_email": issue.reporter_email,
        "assigned_staff": issue.assigned_staff,
        "priority": issue.priority.value,
        "resolved_at": issue.resolved_at,
    }


def admin_stats(db: Session) -> dict:
    users_by_role = _count_by(db, User.role, UserRole)
    issues_by_status = _count_by(db, Issue.status, IssueStatus)
    issues_by_priority = _count_by(db, Issue.priority, IssuePriority)

    revenue = db.query(func.coalesce(func.sum(Payment.amount), 0.0)).scalar() or 0.0
    revenue_by_purpose = {p.value: 0.0 for p in PaymentPurpose}
    for purpose, total in db.query(Payment.purpose, func.sum(Payment.amount)).group_by(Payment.purpose).all():
        revenue_by_purpose[purpose.value] = float(total or 0.0)

    resolved_count = func.count(TimelineEntry.id).label("resolved")
    top_staff = (
        db.query(TimelineEntry.updated_by, resolved_count)
        .filter(TimelineEntry.status == IssueStatus.resolved.value)
        .group_by(TimelineEntry.updated_by)
        .order_by(resolved_count.desc(), TimelineEntry.updated_by.asc())
        .limit(TOP_N)
        .all()
    )

    reported_count = func.count(Issue.id).label("reported")
    top_reporters = (
        db.query(Issue.reporter_email, reported_count)
        .group_by(Issue.reporter_email)
        .order_by(reported_count.desc(), Issue.reporter_email.asc())
        .limit(TOP_N)
        .all()
    )

    latest_resolved = (
        db.query(Issue)
        .filter(
            Issue.resolved_at.is_not(None),
            Issue.status.in_([IssueStatus.resolved, IssueStatus.closed]),
        )
        .order_by(Issue.resolved_at.desc(), Issue.id.desc())
        .limit(LATEST_RESOLVED_N)
        .all()
    )

    return {
        "users": {
            "total": sum(users_by_role.values()),
            "by_role": users_by_role,
            "premium": db.query(User).filter(User.premium.is_(True)).count(),
            "blocked": db.query(User).filter(User.is_blocked.is_(True)).count(),
        },
        "issues": {
            "total": sum(issues_by_status.values()),
            "by_status": issues_by_status,
            "by_priority": issues_by_priority,
            "hidden": db.query(Issue).filter(Issue.is_hidden.is_(True)).count(),
        },
        "payments": {
            "count": db.query(Payment).count(),
            "revenue": float(revenue),
            "by_purpose": revenue_by_purpose,
        },
        "top_staff": [{"email": e, "resolved": n} for e, n in top_staff],
        "top_reporters": [{"email": e, "reported": n} for e, n in top_reporters],
        "latest_resolved": [_issue_summary(i) for i in latest_resolved],
    }


def citizen_stats(db: Session, email: str) -> dict:
    by_status = _count_by(db, Issue.status, IssueStatus, Issue.reporter_email == email)
    spent = (
        db.query(func.coalesce(func.sum(Payment.amount), 0.0))
        .filter(Payment.user_email == email)
        .scalar()
        or 0.0
    )
    return {
        "email": email,
        "total": sum(by_status.values()),
        "by_status": by_status,
        "boosted": db.query(Issue).filter(Issue.reporter_email == email, Issue.is_boosted.is_(True)).count(),
        "upvotes_received": int(
            db.query(func.coalesce(func.sum(Issue.upvotes), 0)).filter(Issue.reporter_email == email).scalar() or 0
        ),
        "total_paid": float(spent),
    }


def staff_stats(db: Session, email: str) -> dict:
    by_status = _count_by(db, Issue.status, IssueStatus, Issue.assigned_staff == email)
    return {
        "email": email,
        "assigned": sum(by_status.values()),
        "by_status": by_status,
        "high_priority_open": db.query(Issue)
        .filter(
            Issue.assigned_staff == email,
            Issue.priority == IssuePriority.high,
            Issue.status.in_([IssueStatus.pending, IssueStatus.in_progress]),
        )
        .count(),
        "resolved_by_me": db.query(TimelineEntry)
        .filter(TimelineEntry.updated_by == email, TimelineEntry.status == IssueStatus.resolved.value)
        .count(),
    }
