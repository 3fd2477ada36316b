# File: app/schemas/timeline.py
from datetime import datetime
from pydantic import BaseModel

class TimelineOut(BaseModel):
    id: int
    issue_id: str
    status: str
    message: str
    updated_by: str
    time: datetime

    class Config:
        from_attributes = True
