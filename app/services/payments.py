#app/services/payments.py
import logging
from typing import Optional

import requests
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ProviderError, ValidationFailed
from app.db.session import commit_or_raise
from app.models.payment import Payment, PaymentPurpose
from app.models.user import User

logger = logging.getLogger(__name__)


class StripeGateway:
    """Creates PaymentIntents through Stripe's REST API; returns the client secret."""

    def __init__(self, secret_key: Optional[str], api_base: str, currency: str, timeout: float):
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.currency = currency
        self.timeout = timeout

    def create_intent(self, amount: float, purpose: str, metadata: dict) -> str:
        if not self.secret_key:
            raise ProviderError("Payment provider is not configured")
        data = {
            # Stripe takes the smallest currency unit
            "amount": int(round(amount * 100)),
            "currency": self.currency,
            "payment_method_types[]": "card",
            "metadata[purpose]": purpose,
        }
        for key, value in metadata.items():
            if value is not None:
                data[f"metadata[{key}]"] = str(value)
        try:
            r = requests.post(
                f"{self.api_base}/v1/payment_intents",
                headers={"Authorization": f"Bearer {self.secret_key}"},
                data=data,
                timeout=self.timeout,
            )
            r.raise_for_status()
            secret = r.json().get("client_secret")
        except (requests.RequestException, ValueError) as e:
            logger.error("Payment intent creation failed: %s", e)
            raise ProviderError() from e
        if not secret:
            raise ProviderError("Payment provider returned no client secret")
        return secret


def get_payment_gateway() -> StripeGateway:
    return StripeGateway(
        settings.stripe_secret_key,
        settings.stripe_api_base,
        settings.payment_currency,
        settings.payment_timeout_sec,
    )


def create_intent(gateway: StripeGateway, user: User, amount: float,
                  purpose: PaymentPurpose, issue_id: Optional[int] = None) -> str:
    if amount is None or amount <= 0:
        raise ValidationFailed("Amount must be a positive number")
    return gateway.create_intent(amount, purpose.value, {"issue_id": issue_id, "user_email": user.email})


def record_payment(db: Session, user_email: str, transaction_id: str, amount: float,
                   purpose: PaymentPurpose, issue_id: Optional[int] = None) -> Payment:
    """Stage a ledger row in the caller's unit of work."""
    payment = Payment(
        issue_id=issue_id,
        user_email=user_email,
        transaction_id=transaction_id,
        amount=amount,
        purpose=purpose,
    )
    db.add(payment)
    return payment


def verify_premium(db: Session, user: User, transaction_id: str, amount: float) -> User:
    # TODO: reject a transaction_id that is already in the ledger once replay handling is agreed on
    record_payment(db, user.email, transaction_id, amount, PaymentPurpose.premium)
    db.query(User).filter(User.id == user.id).update({User.premium: True}, synchronize_session=False)
    commit_or_raise(db, "activate premium")
    db.refresh(user)
    logger.info("Premium payment %s recorded for %s (amount=%s)", transaction_id, user.email, amount)
    return user


def list_payments(db: Session, user_email: Optional[str] = None) -> list[Payment]:
    q = db.query(Payment)
    if user_email is not None:
        q = q.filter(Payment.user_email == user_email)
    return q.order_by(Payment.date.desc(), Payment.id.desc()).all()
