# File: app/schemas/payment.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from app.models.payment import PaymentPurpose

class PaymentIntentIn(BaseModel):
    amount: float = Field(gt=0)
    purpose: PaymentPurpose = PaymentPurpose.issue_boost
    issue_id: Optional[int] = None

class PaymentIntentOut(BaseModel):
    client_secret: str

class PremiumVerifyIn(BaseModel):
    transaction_id: str = Field(min_length=1, max_length=255)
    amount: float = Field(gt=0)

class PaymentOut(BaseModel):
    id: int
    issue_id: Optional[int] = None
    user_email: str
    transaction_id: str
    amount: float
    purpose: PaymentPurpose
    date: datetime

    class Config:
        from_attributes = True
