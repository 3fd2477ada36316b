# File: app/routers/timeline.py
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.errors import NotFound
from app.core.security import get_optional_user
from app.models.issue import Issue
from app.models.user import User
from app.schemas.timeline import TimelineOut
from app.services import timeline
from app.services.issues import can_see_hidden

router = APIRouter(prefix="/timeline", tags=["timeline"])

@router.get("/{issue_id}", response_model=List[TimelineOut])
def issue_timeline(issue_id: str, db: Session = Depends(get_db),
                   reader: Optional[User] = Depends(get_optional_user)):
    # newest first; entries of deleted issues are still returned
    if issue_id.isdigit():
        issue = db.get(Issue, int(issue_id))
        if issue is not None and issue.is_hidden and not can_see_hidden(issue, reader):
            raise NotFound("Issue not found")
    return timeline.list_for_issue(db, issue_id)
