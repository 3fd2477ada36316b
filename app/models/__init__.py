# File: app/models/__init__.py
from app.db.base import Base
from app.models.user import User, UserRole
from app.models.issue import Issue, IssuePriority, IssueStatus, IssueUpvote
from app.models.timeline import TimelineEntry
from app.models.comment import Comment
from app.models.payment import Payment, PaymentPurpose

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Issue",
    "IssuePriority",
    "IssueStatus",
    "IssueUpvote",
    "TimelineEntry",
    "Comment",
    "Payment",
    "PaymentPurpose",
]
