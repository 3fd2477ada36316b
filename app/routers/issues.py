# File: app/routers/issues.py
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional, Union
from app.db.session import get_db
from app.core.config import settings
from app.core.ratelimit import limiter
from app.core.security import (
    get_current_user,
    get_optional_user,
    require_not_blocked,
    require_role,
    require_self_or_role,
)
from app.models.issue import IssuePriority, IssueStatus
from app.models.user import User, UserRole
from app.schemas.issue import (
    AssignIn,
    BoostIn,
    IssueCreate,
    IssueEdit,
    IssueOut,
    IssueStatusPatch,
    PaginatedIssuesOut,
    PriorityPatch,
    VisibilityPatch,
)
from app.services import issues as lifecycle

router = APIRouter(prefix="/issues", tags=["issues"])

DEFAULT_PAGE_SIZE = 10


@router.post("", response_model=IssueOut, status_code=201)
@limiter.limit(settings.issue_create_rate_limit)
def create_issue(
    request: Request,
    body: IssueCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_not_blocked),
):
    return lifecycle.create_issue(db, user, body, settings.free_issue_quota)


@router.get("", response_model=Union[PaginatedIssuesOut, List[IssueOut]])
def list_issues(
    db: Session = Depends(get_db),
    status: Optional[IssueStatus] = Query(default=None),
    priority: Optional[IssuePriority] = Query(default=None),
    category: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    current: Optional[User] = Depends(get_optional_user),
):
    include_hidden = current is not None and current.role == UserRole.admin

    # --------- FULL LIST (no pagination params) ---------
    if page is None and limit is None:
        return lifecycle.search_issues(
            db, status=status, priority=priority, category=category,
            search=search, include_hidden=include_hidden,
        )

    page = page or 1
    limit = limit or DEFAULT_PAGE_SIZE
    total, items = lifecycle.search_issues(
        db, status=status, priority=priority, category=category,
        search=search, include_hidden=include_hidden, page=page, limit=limit,
    )
    return {"total": total, "page": page, "limit": limit, "items": items}


@router.get("/user/{email}", response_model=List[IssueOut],
            dependencies=[Depends(require_self_or_role(UserRole.admin))])
def issues_by_reporter(email: str, db: Session = Depends(get_db)):
    return lifecycle.issues_by_reporter(db, email)


@router.get("/staff/{email}", response_model=List[IssueOut],
            dependencies=[Depends(require_self_or_role(UserRole.admin))])
def issues_for_staff(email: str, db: Session = Depends(get_db)):
    return lifecycle.issues_for_staff(db, email)


@router.get("/{issue_id}", response_model=IssueOut)
def get_issue(
    issue_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lifecycle.get_visible_issue(db, issue_id, current_user)


@router.patch("/{issue_id}/status", response_model=IssueOut)
def update_status(
    issue_id: int,
    body: IssueStatusPatch,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lifecycle.update_status(db, issue_id, body.status, current_user, note=body.note)


@router.patch("/assign/{issue_id}", response_model=IssueOut)
def assign_issue(
    issue_id: int,
    body: AssignIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_role(UserRole.admin)),
):
    return lifecycle.assign_staff(db, issue_id, body.staff_email.strip(), admin)


@router.patch("/upvote/{issue_id}", response_model=IssueOut)
def upvote_issue(
    issue_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lifecycle.upvote(db, issue_id, current_user)


@router.post("/{issue_id}/boost", response_model=IssueOut)
def boost_issue(
    issue_id: int,
    body: BoostIn,
    db: Session = Depends(get_db),
    user: User = Depends(require_not_blocked),
):
    return lifecycle.boost(db, issue_id, user, body.transaction_id, body.amount)


@router.patch("/edit/{issue_id}", response_model=IssueOut)
def edit_issue(
    issue_id: int,
    body: IssueEdit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lifecycle.edit_issue(db, issue_id, current_user, body)


@router.patch("/{issue_id}/priority", response_model=IssueOut)
def set_priority(
    issue_id: int,
    body: PriorityPatch,
    db: Session = Depends(get_db),
    admin: User = Depends(require_role(UserRole.admin)),
):
    return lifecycle.set_priority(db, issue_id, body.priority, admin)


@router.patch("/{issue_id}/visibility", response_model=IssueOut)
def set_visibility(
    issue_id: int,
    body: VisibilityPatch,
    db: Session = Depends(get_db),
    admin: User = Depends(require_role(UserRole.admin)),
):
    return lifecycle.set_hidden(db, issue_id, body.is_hidden, admin)


@router.delete("/{issue_id}")
def delete_issue(
    issue_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lifecycle.delete_issue(db, issue_id, current_user)
    return {"ok": True, "deleted_id": issue_id}
