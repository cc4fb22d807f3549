"""Shared fixtures: in-memory database, app client and token helpers."""

import os

os.environ.setdefault("EXPENSE_TRACKER_JWT_SECRET", "test-secret")
os.environ.setdefault("EXPENSE_TRACKER_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth import create_access_token
from config import Settings, get_settings
from database import Base, get_db
from main import app
from schemas import CurrentUser


@pytest.fixture
def settings():
    return Settings(jwt_secret="test-secret", database_url="sqlite://")


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def alice():
    return CurrentUser(user_id="alice-id", name="Alice")


@pytest.fixture
def bob():
    return CurrentUser(user_id="bob-id", name="Bob")


@pytest.fixture
def client(session_factory, settings):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(settings):
    """Build x-auth-token headers for a user id and optional name."""

    def make(user_id="alice-id", name="Alice"):
        claims = {"sub": user_id}
        if name is not None:
            claims["name"] = name
        return {"x-auth-token": create_access_token(claims, settings)}

    return make
