# File: app/routers/users.py
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.security import require_role, require_self, require_self_or_role
from app.models.user import User, UserRole
from app.schemas.user import (
    BlockPatch,
    ProfilePatch,
    RolePatch,
    UserCreate,
    UserCreateResult,
    UserOut,
)
from app.services import users as directory

router = APIRouter(prefix="/users", tags=["users"])

@router.post("", response_model=UserCreateResult)
def register_user(body: UserCreate, db: Session = Depends(get_db)):
    # role and flags in the body are not honoured; new accounts are citizens
    user, created = directory.create_if_absent(
        db, body.email, name=body.name, image=body.image, has_password=body.has_password
    )
    if not created:
        return {"message": "User already exists", "inserted_id": None, "user": user}
    return {"message": "User created", "inserted_id": user.id, "user": user}

@router.get("", response_model=List[UserOut], dependencies=[Depends(require_role(UserRole.admin))])
def list_users(db: Session = Depends(get_db)):
    return directory.list_users(db)

@router.get("/{email}", response_model=Optional[UserOut],
            dependencies=[Depends(require_self_or_role(UserRole.admin))])
def get_user(email: str, db: Session = Depends(get_db)):
    return directory.get_by_email(db, email)

@router.patch("/role/{email}", response_model=UserOut)
def change_role(email: str, body: RolePatch, db: Session = Depends(get_db),
                admin: User = Depends(require_role(UserRole.admin))):
    return directory.set_role(db, email, body.role, admin)

@router.patch("/block/{email}", response_model=UserOut)
def change_block(email: str, body: BlockPatch, db: Session = Depends(get_db),
                 admin: User = Depends(require_role(UserRole.admin))):
    return directory.set_blocked(db, email, body.is_blocked, admin)

@router.patch("/premium/{email}", response_model=UserOut, dependencies=[Depends(require_self)])
def mark_premium(email: str, db: Session = Depends(get_db)):
    return directory.set_premium(db, email)

@router.patch("/profile/{email}", response_model=UserOut, dependencies=[Depends(require_self)])
def update_profile(email: str, body: ProfilePatch, db: Session = Depends(get_db)):
    return directory.update_profile(db, email, name=body.name, image=body.image)
