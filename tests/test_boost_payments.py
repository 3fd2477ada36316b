"""Paid boosts, premium verification and the payment-intent gateway."""
import pytest
import requests

from app.core.errors import ProviderError, ValidationFailed
from app.main import app
from app.models import Payment, PaymentPurpose, User
from app.services import payments
from app.services.payments import StripeGateway, get_payment_gateway
from tests.conftest import auth


def _boost(client, email, issue_id, transaction_id="pi_boost_1", amount=100):
    return client.post(
        f"/issues/{issue_id}/boost",
        json={"transaction_id": transaction_id, "amount": amount},
        headers=auth(email),
    )


class TestBoost:
    def test_boost_raises_priority_and_records_payment(self, client, db, citizen, report):
        issue = report(citizen.email)
        r = _boost(client, citizen.email, issue["id"])
        assert r.status_code == 200
        assert r.json()["priority"] == "high"
        assert r.json()["is_boosted"] is True

        payment = db.query(Payment).one()
        assert payment.issue_id == issue["id"]
        assert payment.user_email == citizen.email
        assert payment.purpose == PaymentPurpose.issue_boost
        assert payment.amount == 100

        latest = client.get(f"/timeline/{issue['id']}").json()[0]
        assert latest["status"] == "boosted"
        assert latest["message"] == "Issue priority boosted to high"

    def test_second_boost_is_rejected(self, client, db, citizen, other_citizen, report):
        issue = report(citizen.email)
        _boost(client, citizen.email, issue["id"])
        r = _boost(client, other_citizen.email, issue["id"], transaction_id="pi_boost_2")
        assert r.status_code == 400
        assert r.json()["error"] == "already_boosted"
        assert db.query(Payment).count() == 1

    def test_issue_already_high_cannot_be_boosted(self, client, db, citizen, admin, report):
        issue = report(citizen.email)
        client.patch(f"/issues/{issue['id']}/priority", json={"priority": "high"}, headers=auth(admin.email))
        r = _boost(client, citizen.email, issue["id"])
        assert r.status_code == 400
        assert db.query(Payment).count() == 0

    def test_amount_must_be_positive(self, client, citizen, report):
        issue = report(citizen.email)
        assert _boost(client, citizen.email, issue["id"], amount=0).status_code == 400
        assert _boost(client, citizen.email, issue["id"], amount=-5).status_code == 400

    def test_blocked_user_cannot_boost(self, client, citizen, make_user, report):
        issue = report(citizen.email)
        blocked = make_user("blocked@example.com", is_blocked=True)
        assert _boost(client, blocked.email, issue["id"]).status_code == 403

    def test_missing_issue(self, client, citizen):
        assert _boost(client, citizen.email, 777).status_code == 404


class TestPaymentIntent:
    def test_returns_client_secret(self, client, citizen, gateway):
        r = client.post(
            "/create-payment-intent",
            json={"amount": 100, "issue_id": 7},
            headers=auth(citizen.email),
        )
        assert r.status_code == 200
        assert r.json() == {"client_secret": "pi_test_1_secret"}
        amount, purpose, metadata = gateway.calls[0]
        assert amount == 100
        assert purpose == "issue_boost"
        assert metadata == {"issue_id": 7, "user_email": citizen.email}

    def test_requires_identity(self, client, db):
        assert client.post("/create-payment-intent", json={"amount": 100}).status_code == 401

    def test_rejects_non_positive_amount(self, client, citizen, gateway):
        r = client.post("/create-payment-intent", json={"amount": 0}, headers=auth(citizen.email))
        assert r.status_code == 400
        assert gateway.calls == []

    def test_provider_failure_is_unexpected(self, client, citizen):
        class Down:
            def create_intent(self, amount, purpose, metadata):
                raise ProviderError()

        app.dependency_overrides[get_payment_gateway] = lambda: Down()
        r = client.post("/create-payment-intent", json={"amount": 50}, headers=auth(citizen.email))
        assert r.status_code == 500
        assert r.json() == {"message": "Payment provider error", "error": "unexpected"}

    def test_service_validates_amount(self, gateway):
        with pytest.raises(ValidationFailed):
            payments.create_intent(gateway, User(email="a@x"), 0, PaymentPurpose.premium)


class _Response:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


class TestStripeGateway:
    def test_posts_amount_in_cents(self, monkeypatch):
        seen = {}

        def fake_post(url, headers, data, timeout):
            seen.update(url=url, headers=headers, data=data, timeout=timeout)
            return _Response({"id": "pi_1", "client_secret": "pi_1_secret_abc"})

        monkeypatch.setattr(payments.requests, "post", fake_post)
        gw = StripeGateway("sk_test_123", "https://stripe.test/", "usd", 5)
        secret = gw.create_intent(12.5, "premium", {"user_email": "a@x", "issue_id": None})

        assert secret == "pi_1_secret_abc"
        assert seen["url"] == "https://stripe.test/v1/payment_intents"
        assert seen["headers"] == {"Authorization": "Bearer sk_test_123"}
        assert seen["data"]["amount"] == 1250
        assert seen["data"]["currency"] == "usd"
        assert seen["data"]["metadata[purpose]"] == "premium"
        assert seen["data"]["metadata[user_email]"] == "a@x"
        assert "metadata[issue_id]" not in seen["data"]
        assert seen["timeout"] == 5

    def test_unconfigured_key(self):
        with pytest.raises(ProviderError):
            StripeGateway(None, "https://stripe.test", "usd", 5).create_intent(10, "premium", {})

    def test_network_and_http_errors(self, monkeypatch):
        gw = StripeGateway("sk_test_123", "https://stripe.test", "usd", 5)

        def refused(*args, **kwargs):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(payments.requests, "post", refused)
        with pytest.raises(ProviderError):
            gw.create_intent(10, "premium", {})

        monkeypatch.setattr(payments.requests, "post", lambda *a, **kw: _Response({"error": {}}, status=402))
        with pytest.raises(ProviderError):
            gw.create_intent(10, "premium", {})

        monkeypatch.setattr(payments.requests, "post", lambda *a, **kw: _Response({"id": "pi_2"}))
        with pytest.raises(ProviderError):
            gw.create_intent(10, "premium", {})


class TestPremium:
    def test_verify_marks_premium_and_records_payment(self, client, db, citizen):
        r = client.post(
            "/payment/premium/verify",
            json={"transaction_id": "pi_premium_1", "amount": 1000},
            headers=auth(citizen.email),
        )
        assert r.status_code == 200
        assert r.json()["premium"] is True

        payment = db.query(Payment).one()
        assert payment.purpose == PaymentPurpose.premium
        assert payment.issue_id is None

        mine = client.get("/payments/me", headers=auth(citizen.email)).json()
        assert [p["transaction_id"] for p in mine] == ["pi_premium_1"]

    def test_premium_lifts_quota(self, client, citizen, report):
        for i in range(3):
            report(citizen.email, title=f"Issue number {i}")
        client.post(
            "/payment/premium/verify",
            json={"transaction_id": "pi_premium_1", "amount": 1000},
            headers=auth(citizen.email),
        )
        report(citizen.email, title="Now allowed")

    def test_payment_listing(self, client, citizen, other_citizen, admin, report):
        issue = report(citizen.email)
        _boost(client, other_citizen.email, issue["id"], transaction_id="pi_b")
        client.post(
            "/payment/premium/verify",
            json={"transaction_id": "pi_p", "amount": 1000},
            headers=auth(citizen.email),
        )

        r = client.get("/payments", headers=auth(admin.email))
        assert r.status_code == 200
        assert {p["transaction_id"] for p in r.json()} == {"pi_b", "pi_p"}
        assert client.get("/payments", headers=auth(citizen.email)).status_code == 403

        mine = client.get("/payments/me", headers=auth(other_citizen.email)).json()
        assert [(p["transaction_id"], p["purpose"]) for p in mine] == [("pi_b", "issue_boost")]
