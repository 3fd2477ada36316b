# File: app/routers/payments.py
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.config import settings
from app.core.ratelimit import limiter
from app.core.security import get_current_user, require_role
from app.models.user import User, UserRole
from app.schemas.payment import PaymentIntentIn, PaymentIntentOut, PaymentOut, PremiumVerifyIn
from app.schemas.user import UserOut
from app.services import payments
from app.services.payments import StripeGateway, get_payment_gateway

router = APIRouter(tags=["payments"])

@router.post("/create-payment-intent", response_model=PaymentIntentOut)
@limiter.limit(settings.payment_rate_limit)
def create_payment_intent(
    request: Request,
    body: PaymentIntentIn,
    user: User = Depends(get_current_user),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    secret = payments.create_intent(gateway, user, body.amount, body.purpose, body.issue_id)
    return {"client_secret": secret}

@router.post("/payment/premium/verify", response_model=UserOut)
def verify_premium(body: PremiumVerifyIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return payments.verify_premium(db, user, body.transaction_id, body.amount)

@router.get("/payments", response_model=List[PaymentOut], dependencies=[Depends(require_role(UserRole.admin))])
def list_payments(db: Session = Depends(get_db)):
    return payments.list_payments(db)

@router.get("/payments/me", response_model=List[PaymentOut])
def my_payments(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return payments.list_payments(db, user.email)
