# File: app/models/payment.py
from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Float, Integer, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base, utcnow

class PaymentPurpose(PyEnum):
    issue_boost = "issue_boost"
    premium = "premium"

class Payment(Base):
    """Append-only ledger row. issue_id is not a foreign key so the ledger survives issue deletion."""
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    issue_id: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)
    user_email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    transaction_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    purpose: Mapped[PaymentPurpose] = mapped_column(Enum(PaymentPurpose), nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
