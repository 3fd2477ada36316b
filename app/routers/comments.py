# File: app/routers/comments.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.config import settings
from app.core.ratelimit import limiter
from app.core.security import get_current_user, get_optional_user, require_not_blocked
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentOut
from app.services import comments

router = APIRouter(prefix="/comments", tags=["comments"])

@router.get("/{issue_id}", response_model=List[CommentOut])
def list_comments(issue_id: int, db: Session = Depends(get_db),
                  reader: Optional[User] = Depends(get_optional_user)):
    return comments.list_comments(db, issue_id, reader)

@router.post("", response_model=CommentOut, status_code=201)
@limiter.limit(settings.comment_rate_limit)
def add_comment(
    request: Request,
    body: CommentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_not_blocked),
):
    return comments.add_comment(db, user, body.issue_id, body.text)

@router.delete("/{comment_id}")
def delete_comment(comment_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    comments.delete_comment(db, comment_id, user)
    return {"ok": True}
