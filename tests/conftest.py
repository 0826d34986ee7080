"""Pytest configuration and fixtures for the web app tests."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_BACKEND"] = "memory"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_USER"] = "admin"
os.environ["ADMIN_PASS"] = "testpass123"
os.environ["SUPPORT_CONTACT"] = "bitrewards_support"

import pytest
from httpx import ASGITransport, AsyncClient

from bitrewards.core.database import Base, SessionLocal, engine, init_db
from bitrewards.main import app
from bitrewards.models.user import User


@pytest.fixture(autouse=True)
def _init_db():
    """Fresh tables and seed admin for every test (ASGI lifespan doesn't run with httpx)."""
    Base.metadata.drop_all(bind=engine)
    init_db(force=True)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _new_client():
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    )


@pytest.fixture
async def client():
    """Anonymous async HTTP client."""
    async with _new_client() as ac:
        yield ac


@pytest.fixture
async def user_client():
    """Client registered (and therefore logged in) as 'alice'."""
    async with _new_client() as ac:
        r = await ac.post("/register", data={"username": "alice", "password": "wonderland"})
        assert r.status_code == 303, f"Registration failed: {r.text}"
        yield ac


@pytest.fixture
async def admin_client():
    """Client logged in as the seeded administrator."""
    async with _new_client() as ac:
        r = await ac.post("/login", data={"username": "admin", "password": "testpass123"})
        assert r.status_code == 303, f"Login failed: {r.text}"
        assert r.headers["location"] == "/admin"
        yield ac


def get_user(username):
    session = SessionLocal()
    try:
        return session.query(User).filter(User.Username == username).first()
    finally:
        session.close()


@pytest.fixture
def fetch_user():
    """Load a user row in a fresh session, so the balance reflects committed state."""
    return get_user


@pytest.fixture
def set_balance(admin_client, fetch_user):
    async def _set(username, balance):
        user = fetch_user(username)
        r = await admin_client.post(
            "/admin/balance", data={"userId": str(user.UserID), "newBalance": balance}
        )
        assert r.status_code == 303

    return _set
