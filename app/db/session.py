# File: app/db/session.py
# Project: cityfix-backend

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from app.core.errors import Unexpected
from app.core.config import settings

logger = logging.getLogger(__name__)

engine_kwargs = {"pool_pre_ping": True}
if not settings.database_url.startswith("sqlite"):
    engine_kwargs.update(pool_size=5, max_overflow=10, pool_recycle=3600, pool_timeout=30)

engine = create_engine(settings.database_url, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def ping(db: Session) -> None:
    """Raises if the store is unreachable."""
    db.execute(text("SELECT 1"))

def commit_or_raise(db: Session, action: str) -> None:
    """Commit the unit of work; on failure roll back and surface it as an Unexpected error."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Commit failed while trying to %s", action)
        raise Unexpected(f"Failed to {action}") from e
