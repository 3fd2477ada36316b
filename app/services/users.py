# File: app/services/users.py
"""User directory: account records, roles, block and premium flags."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.db.session import commit_or_raise
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


def get_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def _get_or_404(db: Session, email: str) -> User:
    user = get_by_email(db, email)
    if not user:
        raise NotFound("User not found")
    return user


def create_if_absent(db: Session, email: str, name: Optional[str] = None,
                     image: Optional[str] = None, has_password: bool = False) -> tuple[User, bool]:
    """
    Return (user, created). Insert-only: an existing record's role and flags are never touched.

    Two first requests for the same new email race on the unique index; the loser
    rolls back and reads the winner's row.
    """
    user = get_by_email(db, email)
    if user:
        return user, False

    user = User(
        email=email,
        name=name,
        image=image,
        role=UserRole.citizen,
        premium=False,
        is_blocked=False,
        has_password=has_password,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = get_by_email(db, email)
        if existing is None:
            raise
        return existing, False
    db.refresh(user)
    logger.info("Provisioned user %s", email)
    return user, True


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def set_role(db: Session, email: str, role: UserRole, actor: User) -> User:
    user = _get_or_404(db, email)
    old = user.role
    user.role = role
    commit_or_raise(db, "update role")
    db.refresh(user)
    logger.info("Role of %s changed %s -> %s by %s", email, old.value, role.value, actor.email)
    return user


def set_blocked(db: Session, email: str, blocked: bool, actor: User) -> User:
    user = _get_or_404(db, email)
    user.is_blocked = blocked
    commit_or_raise(db, "update block status")
    db.refresh(user)
    logger.info("User %s %s by %s", email, "blocked" if blocked else "unblocked", actor.email)
    return user


def set_premium(db: Session, email: str) -> User:
    # one-way: nothing in the directory ever clears premium
    user = _get_or_404(db, email)
    if not user.premium:
        user.premium = True
        commit_or_raise(db, "activate premium")
        db.refresh(user)
        logger.info("Premium activated for %s", email)
    return user


def update_profile(db: Session, email: str, name: Optional[str] = None,
                   image: Optional[str] = None) -> User:
    user = _get_or_404(db, email)
    if name is not None:
        user.name = name
    if image is not None:
        user.image = image
    commit_or_raise(db, "update profile")
    db.refresh(user)
    return user
