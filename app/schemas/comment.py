# File: app/schemas/comment.py
from datetime import datetime
from pydantic import BaseModel, Field

class CommentCreate(BaseModel):
    issue_id: int
    text: str = Field(min_length=1, max_length=2000)

class CommentOut(BaseModel):
    id: int
    issue_id: int
    text: str
    user_email: str
    time: datetime

    class Config:
        from_attributes = True
