# File: app/services/issues.py
"""
Issue lifecycle: creation quota, assignment, status transitions, upvotes,
boosts, edits, hiding and deletion.

Every mutation that changes status, ownership of work, priority or visibility
stages a timeline entry and commits it in the same transaction. Plain reporter
edits write no entry.

Concurrent requests are handled with conditional single-statement updates
(status/assignee/boost guards in the WHERE clause), a unique upvoter row, and a
row lock on the reporter while the open-issue quota is counted.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    AlreadyBoosted,
    DuplicateVote,
    Forbidden,
    InvalidTransition,
    NotFound,
    QuotaExceeded,
    ValidationFailed,
)
from app.core.security import is_owner_or_role
from app.db.session import commit_or_raise
from app.models.comment import Comment
from app.models.issue import Issue, IssuePriority, IssueStatus, IssueUpvote
from app.models.payment import PaymentPurpose
from app.models.user import User, UserRole
from app.schemas.issue import IssueCreate, IssueEdit
from app.services import payments, timeline

logger = logging.getLogger(__name__)

OPEN_STATUSES = (IssueStatus.pending, IssueStatus.in_progress, IssueStatus.resolved)

# forward flow available to the assigned staff member; admins bypass it
STAFF_TRANSITIONS: dict[IssueStatus, tuple[IssueStatus, ...]] = {
    IssueStatus.pending: (IssueStatus.in_progress,),
    IssueStatus.in_progress: (IssueStatus.resolved,),
    IssueStatus.resolved: (IssueStatus.closed,),
    IssueStatus.closed: (),
}

# timeline markers that are not issue statuses
DELETED = "deleted"
BOOSTED = "boosted"
PRIORITY = "priority"
HIDDEN = "hidden"
VISIBLE = "visible"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def allowed_next(status: IssueStatus) -> tuple[IssueStatus, ...]:
    return STAFF_TRANSITIONS.get(status, ())


def get_issue(db: Session, issue_id: int) -> Issue:
    issue = db.query(Issue).filter(Issue.id == issue_id).first()
    if not issue:
        raise NotFound("Issue not found")
    return issue


def can_see_hidden(issue: Issue, user: Optional[User]) -> bool:
    if user is None:
        return False
    if is_owner_or_role(user, issue.reporter_email, UserRole.admin):
        return True
    return issue.assigned_staff is not None and user.email == issue.assigned_staff


def get_visible_issue(db: Session, issue_id: int, user: Optional[User]) -> Issue:
    issue = get_issue(db, issue_id)
    if issue.is_hidden and not can_see_hidden(issue, user):
        raise NotFound("Issue not found")
    return issue


def count_open_issues(db: Session, email: str) -> int:
    return (
        db.query(Issue)
        .filter(Issue.reporter_email == email, Issue.status.in_(OPEN_STATUSES))
        .count()
    )


def create_issue(db: Session, reporter: User, data: IssueCreate, quota: int) -> Issue:
    # lock the reporter row so concurrent creations count sequentially
    locked = db.query(User).filter(User.id == reporter.id).with_for_update().one()
    if not locked.premium:
        open_count = count_open_issues(db, locked.email)
        if open_count >= quota:
            raise QuotaExceeded(
                f"Free accounts can have at most {quota} open issues. Upgrade to premium to report more."
            )

    issue = Issue(
        reporter_email=locked.email,
        title=data.title.strip(),
        description=data.description,
        location=data.location,
        category=data.category,
        image=data.image,
        status=IssueStatus.pending,
        priority=IssuePriority.normal,
        upvotes=0,
        is_hidden=False,
        is_boosted=False,
        reported_at=_now(),
    )
    db.add(issue)
    db.flush()
    timeline.append(db, issue.id, IssueStatus.pending.value, "Issue reported", locked.email)
    commit_or_raise(db, "create issue")
    db.refresh(issue)
    logger.info("Issue %s reported by %s", issue.id, issue.reporter_email)
    return issue


def assign_staff(db: Session, issue_id: int, staff_email: str, actor: User) -> Issue:
    issue = get_issue(db, issue_id)
    staff = (
        db.query(User)
        .filter(User.email == staff_email, User.role == UserRole.staff)
        .first()
    )
    if not staff:
        raise NotFound("Staff member not found")

    values = {Issue.assigned_staff: staff.email, Issue.updated_at: _now()}
    new_status = issue.status
    if issue.status == IssueStatus.pending:
        new_status = IssueStatus.in_progress
        values[Issue.status] = new_status
    db.query(Issue).filter(Issue.id == issue.id).update(values, synchronize_session=False)
    timeline.append(db, issue.id, new_status.value, f"Assigned to staff {staff.email}", actor.email)
    commit_or_raise(db, "assign staff")
    db.refresh(issue)
    logger.info("Issue %s assigned to %s by %s", issue.id, staff.email, actor.email)
    return issue


def update_status(db: Session, issue_id: int, target: IssueStatus, actor: User,
                  note: Optional[str] = None) -> Issue:
    issue = get_issue(db, issue_id)
    current = issue.status

    if actor.role == UserRole.citizen:
        raise Forbidden("Citizens cannot update issue status")

    now = _now()
    values = {Issue.status: target, Issue.updated_at: now}
    if target == IssueStatus.resolved:
        values[Issue.resolved_at] = now
    elif target in (IssueStatus.pending, IssueStatus.in_progress):
        # reopened; closing keeps the resolution time
        values[Issue.resolved_at] = None

    q = db.query(Issue).filter(Issue.id == issue.id)
    if actor.role == UserRole.staff:
        if issue.assigned_staff != actor.email:
            raise Forbidden("You are not assigned to this issue")
        allowed = allowed_next(current)
        if target not in allowed:
            raise InvalidTransition(current.value, target.value, [s.value for s in allowed])
        # status and assignee are re-checked by the UPDATE itself
        q = q.filter(Issue.status == current, Issue.assigned_staff == actor.email)

    if q.update(values, synchronize_session=False) == 0:
        db.rollback()
        fresh = get_issue(db, issue_id)
        raise InvalidTransition(fresh.status.value, target.value,
                                [s.value for s in allowed_next(fresh.status)])

    message = (note or "").strip() or f"Status changed to {target.value}"
    timeline.append(db, issue.id, target.value, message, actor.email)
    commit_or_raise(db, "update status")
    db.refresh(issue)
    logger.info("Issue %s status %s -> %s by %s", issue.id, current.value, target.value, actor.email)
    return issue


def edit_issue(db: Session, issue_id: int, actor: User, data: IssueEdit) -> Issue:
    issue = get_issue(db, issue_id)
    if issue.reporter_email != actor.email:
        raise Forbidden("Only the reporter can edit this issue")
    changes = data.model_dump(exclude_unset=True)
    if "title" in changes:
        if changes["title"] is None:
            raise ValidationFailed("title cannot be empty")
        changes["title"] = changes["title"].strip()
    for field, value in changes.items():
        setattr(issue, field, value)
    issue.updated_at = _now()
    commit_or_raise(db, "edit issue")
    db.refresh(issue)
    return issue


def delete_issue(db: Session, issue_id: int, actor: User) -> None:
    issue = get_issue(db, issue_id)
    if actor.role != UserRole.admin:
        if issue.reporter_email != actor.email:
            raise Forbidden("Only the reporter or an admin can delete this issue")
        if issue.status != IssueStatus.pending:
            raise Forbidden("Only pending issues can be deleted")

    iid = issue.id
    db.query(Comment).filter(Comment.issue_id == iid).delete(synchronize_session=False)
    db.delete(issue)
    # the entry is keyed to the removed id and stays behind for audit
    timeline.append(db, iid, DELETED, "Issue deleted", actor.email)
    commit_or_raise(db, "delete issue")
    logger.info("Issue %s deleted by %s", iid, actor.email)


def upvote(db: Session, issue_id: int, actor: User) -> Issue:
    issue = get_visible_issue(db, issue_id, actor)
    if issue.reporter_email == actor.email:
        raise Forbidden("You cannot upvote your own issue")

    db.add(IssueUpvote(issue_id=issue.id, user_email=actor.email))
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise DuplicateVote()
    db.query(Issue).filter(Issue.id == issue.id).update(
        {Issue.upvotes: Issue.upvotes + 1}, synchronize_session=False
    )
    commit_or_raise(db, "upvote issue")
    db.refresh(issue)
    return issue


def boost(db: Session, issue_id: int, actor: User, transaction_id: str, amount: float) -> Issue:
    issue = get_visible_issue(db, issue_id, actor)
    rows = (
        db.query(Issue)
        .filter(
            Issue.id == issue.id,
            Issue.is_boosted.is_(False),
            Issue.priority == IssuePriority.normal,
        )
        .update(
            {Issue.priority: IssuePriority.high, Issue.is_boosted: True, Issue.updated_at: _now()},
            synchronize_session=False,
        )
    )
    if rows == 0:
        db.rollback()
        raise AlreadyBoosted()

    payments.record_payment(db, actor.email, transaction_id, amount, PaymentPurpose.issue_boost, issue_id=issue.id)
    timeline.append(db, issue.id, BOOSTED, "Issue priority boosted to high", actor.email)
    commit_or_raise(db, "boost issue")
    db.refresh(issue)
    logger.info("Issue %s boosted by %s (payment %s, amount=%s)", issue.id, actor.email, transaction_id, amount)
    return issue


def set_priority(db: Session, issue_id: int, priority: IssuePriority, actor: User) -> Issue:
    issue = get_issue(db, issue_id)
    issue.priority = priority
    issue.updated_at = _now()
    timeline.append(db, issue.id, PRIORITY, f"Priority set to {priority.value}", actor.email)
    commit_or_raise(db, "update priority")
    db.refresh(issue)
    logger.info("Issue %s priority set to %s by %s", issue.id, priority.value, actor.email)
    return issue


def set_hidden(db: Session, issue_id: int, hidden: bool, actor: User) -> Issue:
    issue = get_issue(db, issue_id)
    issue.is_hidden = hidden
    issue.updated_at = _now()
    timeline.append(db, issue.id, HIDDEN if hidden else VISIBLE,
                    "Issue hidden" if hidden else "Issue made visible", actor.email)
    commit_or_raise(db, "update visibility")
    db.refresh(issue)
    return issue


def search_issues(
    db: Session,
    status: Optional[IssueStatus] = None,
    priority: Optional[IssuePriority] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    include_hidden: bool = False,
    page: Optional[int] = None,
    limit: Optional[int] = None,
):
    """
    Returns the full ordered list, or (total, page_items) when page and limit are given.
    Ordering: high priority first, then newest.
    """
    q = db.query(Issue)
    if not include_hidden:
        q = q.filter(Issue.is_hidden.is_(False))
    if status:
        q = q.filter(Issue.status == status)
    if priority:
        q = q.filter(Issue.priority == priority)
    if category:
        q = q.filter(Issue.category == category)
    if search:
        term = search.strip()
        if term:
            q = q.filter(
                Issue.title.icontains(term, autoescape=True)
                | Issue.description.icontains(term, autoescape=True)
                | Issue.location.icontains(term, autoescape=True)
            )

    priority_rank = case((Issue.priority == IssuePriority.high, 1), else_=0)
    q = q.order_by(priority_rank.desc(), Issue.reported_at.desc(), Issue.id.desc())

    if page is None or limit is None:
        return q.all()
    total = q.count()
    items = q.offset((page - 1) * limit).limit(limit).all()
    return total, items


def issues_by_reporter(db: Session, email: str) -> list[Issue]:
    return (
        db.query(Issue)
        .filter(Issue.reporter_email == email)
        .order_by(Issue.reported_at.desc(), Issue.id.desc())
        .all()
    )


def issues_for_staff(db: Session, email: str) -> list[Issue]:
    priority_rank = case((Issue.priority == IssuePriority.high, 1), else_=0)
    return (
        db.query(Issue)
        .filter(Issue.assigned_staff == email)
        .order_by(priority_rank.desc(), Issue.reported_at.desc(), Issue.id.desc())
        .all()
    )

