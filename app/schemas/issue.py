# File: app/schemas/issue.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.models.issue import IssueStatus, IssuePriority


class IssueCreate(BaseModel):
    # status, priority, counters and timestamps are server-controlled; extra keys are dropped
    title: str = Field(min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=4000)
    location: Optional[str] = Field(default=None, max_length=300)
    category: Optional[str] = Field(default=None, max_length=120)
    image: Optional[str] = Field(default=None, max_length=500)


class IssueEdit(BaseModel):
    """Fields a reporter may overwrite on their own issue."""
    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=4000)
    location: Optional[str] = Field(default=None, max_length=300)
    category: Optional[str] = Field(default=None, max_length=120)
    image: Optional[str] = Field(default=None, max_length=500)


class IssueOut(BaseModel):
    id: int
    reporter_email: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None

    status: IssueStatus
    priority: IssuePriority
    assigned_staff: Optional[str] = None

    upvotes: int = 0
    upvoters: List[str] = []
    is_hidden: bool = False
    is_boosted: bool = False

    reported_at: datetime
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class IssueStatusPatch(BaseModel):
    status: IssueStatus
    note: Optional[str] = Field(default=None, max_length=500)


class AssignIn(BaseModel):
    staff_email: str = Field(min_length=3, max_length=255)


class BoostIn(BaseModel):
    transaction_id: str = Field(min_length=1, max_length=255)
    amount: float = Field(gt=0)


class PriorityPatch(BaseModel):
    priority: IssuePriority


class VisibilityPatch(BaseModel):
    is_hidden: bool


class PaginatedIssuesOut(BaseModel):
    items: list[IssueOut]
    total: int
    page: int
    limit: int
