# File: app/services/comments.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationFailed
from app.core.security import ensure_owner_or_role
from app.db.session import commit_or_raise
from app.models.comment import Comment
from app.models.user import User, UserRole
from app.services.issues import get_visible_issue

logger = logging.getLogger(__name__)


def list_comments(db: Session, issue_id: int, reader: Optional[User] = None) -> list[Comment]:
    issue = get_visible_issue(db, issue_id, reader)
    return (
        db.query(Comment)
        .filter(Comment.issue_id == issue.id)
        .order_by(Comment.time.asc(), Comment.id.asc())
        .all()
    )


def add_comment(db: Session, author: User, issue_id: int, text: str) -> Comment:
    text = (text or "").strip()
    if not text:
        raise ValidationFailed("Comment text cannot be empty")
    issue = get_visible_issue(db, issue_id, author)
    comment = Comment(issue_id=issue.id, text=text, user_email=author.email)
    db.add(comment)
    commit_or_raise(db, "add comment")
    db.refresh(comment)
    return comment


def delete_comment(db: Session, comment_id: int, actor: User) -> None:
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if not comment:
        raise NotFound("Comment not found")
    ensure_owner_or_role(actor, comment.user_email, UserRole.admin,
                         "Only the author or an admin can delete this comment")
    db.delete(comment)
    commit_or_raise(db, "delete comment")
    logger.info("Comment %s on issue %s deleted by %s", comment_id, comment.issue_id, actor.email)
