# File: app/models/issue.py
from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Boolean, Enum, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base, utcnow

class IssueStatus(PyEnum):
    pending = "pending"
    in_progress = "in-progress"
    resolved = "resolved"
    closed = "closed"

class IssuePriority(PyEnum):
    normal = "normal"
    high = "high"

class Issue(Base):
    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    reporter_email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(200), index=True)
    description: Mapped[str | None] = mapped_column(String(4000), nullable=True)
    location: Mapped[str | None] = mapped_column(String(300), nullable=True)
    category: Mapped[str | None] = mapped_column(String(120), index=True, nullable=True)
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[IssueStatus] = mapped_column(Enum(IssueStatus), default=IssueStatus.pending, index=True)
    priority: Mapped[IssuePriority] = mapped_column(Enum(IssuePriority), default=IssuePriority.normal, index=True)
    assigned_staff: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)

    upvotes: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    is_boosted: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")

    reported_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    upvote_rows: Mapped[list["IssueUpvote"]] = relationship(
        back_populates="issue", cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
        order_by="IssueUpvote.id",
    )

    @property
    def upvoters(self) -> list[str]:
        return [r.user_email for r in self.upvote_rows]

class IssueUpvote(Base):
    """One row per (issue, voter); the unique constraint is what rejects a second vote."""
    __tablename__ = "issue_upvotes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    issue_id: Mapped[int] = mapped_column(ForeignKey("issues.id", ondelete="CASCADE"), index=True)
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    issue: Mapped[Issue] = relationship(back_populates="upvote_rows")

    __table_args__ = (UniqueConstraint("issue_id", "user_email", name="uq_issue_upvoter"),)
