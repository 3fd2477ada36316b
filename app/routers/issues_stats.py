# app/routers/issues_stats.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.security import require_role, require_self_or_role
from app.models.user import UserRole
from app.services import stats

router = APIRouter(tags=["issues:stats"])

@router.get("/issues/citizen/stats/{email}", dependencies=[Depends(require_self_or_role(UserRole.admin))])
def citizen_stats(email: str, db: Session = Depends(get_db)):
    return stats.citizen_stats(db, email)

@router.get("/issues/staff/stats/{email}", dependencies=[Depends(require_self_or_role(UserRole.admin))])
def staff_stats(email: str, db: Session = Depends(get_db)):
    return stats.staff_stats(db, email)

@router.get("/dashboard/admin/stats", dependencies=[Depends(require_role(UserRole.admin))])
def admin_stats(db: Session = Depends(get_db)):
    return stats.admin_stats(db)
