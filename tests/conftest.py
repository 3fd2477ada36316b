"""Shared fixtures: in-memory SQLite store, app client, users and tokens."""
import os

# Set environment variables before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")
os.environ["RATELIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.ratelimit import limiter
from app.core.security import make_token
from app.db.session import get_db
from app.main import app
from app.models import Base, User, UserRole
from app.services.payments import get_payment_gateway

# slowapi re-reads RATELIMIT_ENABLED from the environment without a bool cast,
# so the string "false" would leave the limiter on; apply the parsed setting.
limiter.enabled = settings.ratelimit_enabled

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeGateway:
    def __init__(self):
        self.calls = []

    def create_intent(self, amount, purpose, metadata):
        self.calls.append((amount, purpose, metadata))
        return f"pi_test_{len(self.calls)}_secret"


@pytest.fixture
def session_factory():
    return TestSessionLocal


@pytest.fixture
def db():
    """Create test database session."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(db, gateway):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(email, role=UserRole.citizen, premium=False, is_blocked=False, name=None):
        user = User(email=email, role=role, premium=premium, is_blocked=is_blocked, name=name)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


def auth(email):
    return {"Authorization": f"Bearer {make_token(email)}"}


@pytest.fixture
def citizen(make_user):
    return make_user("citizen@example.com")


@pytest.fixture
def other_citizen(make_user):
    return make_user("neighbour@example.com")


@pytest.fixture
def staff(make_user):
    return make_user("staff@city.example", role=UserRole.staff)


@pytest.fixture
def admin(make_user):
    return make_user("admin@city.example", role=UserRole.admin)


@pytest.fixture
def report(client):
    """Post an issue as `email` and return the response body."""
    def _report(email, title="Pothole on Main St", **fields):
        body = {"title": title, "description": "Deep pothole", "location": "Main St 12", "category": "road"}
        body.update(fields)
        r = client.post("/issues", json=body, headers=auth(email))
        assert r.status_code == 201, r.text
        return r.json()
    return _report
