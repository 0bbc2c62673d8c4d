"""
Shared fixtures: an in-memory SQLite database, a TestClient wired to it,
and factories for users and bearer headers.
"""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.schemas.user import UserCreate
from app.services.user_service import UserService
from app.utils.auth import Actor
from app.utils.security import create_access_token
import main
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db, monkeypatch):
    """TestClient whose requests share the test session"""
    # The WebSocket handshake opens its own short-lived session
    monkeypatch.setattr(main, "SessionLocal", TestingSessionLocal)

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(name, email, role, is_active=True, password=PASSWORD):
        user = UserService(db).create_user(UserCreate(name=name, email=email, password=password, role=role))
        user.is_active = is_active
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def admin(make_user):
    return make_user("Ada Admin", "ada@acme.io", "admin")


@pytest.fixture
def manager(make_user):
    return make_user("Max Manager", "max@acme.io", "manager")


@pytest.fixture
def manager2(make_user):
    return make_user("Mia Manager", "mia@acme.io", "manager")


@pytest.fixture
def employee(make_user):
    return make_user("Eve Employee", "eve@acme.io", "employee")


@pytest.fixture
def employee2(make_user):
    return make_user("Finn Employee", "finn@acme.io", "employee")


def bearer(user):
    token = create_access_token(data={"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth():
    return bearer


@pytest.fixture
def actor_for():
    return Actor.from_user
