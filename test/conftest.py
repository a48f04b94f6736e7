"""
Pytest configuration and fixtures for forum tests
"""

import asyncio
import os
import tempfile
from datetime import timedelta
from functools import lru_cache

# Configure the environment before the application modules read their settings
os.environ["DATABASE_URL"] = os.getenv(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), f'forum_test_{os.getpid()}.db')}",
)
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import forum.models  # noqa: E402, F401
from forum.auth import create_access_token, hash_password  # noqa: E402
from forum.config import Settings  # noqa: E402
from forum.constants.roles import Role  # noqa: E402
from forum.database import AsyncSessionLocal, Base, engine  # noqa: E402
from forum.main import create_app  # noqa: E402
from forum.models import User  # noqa: E402


async def _reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


@pytest.fixture
def setup_test_database():
    """Drop and recreate every table before a test that talks to the database."""
    asyncio.run(_reset_database())
    yield


@pytest.fixture
def app(setup_test_database):
    """A fresh application (and so fresh limiter buckets) per test."""
    return create_app()


@pytest.fixture
def production_app(setup_test_database):
    """Application running with the production budgets."""
    return create_app(Settings(environment="production"))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def production_client(production_app):
    with TestClient(production_app) as test_client:
        yield test_client


DEFAULT_PASSWORD = "s3cret-pass"


@lru_cache
def _default_password_hash() -> str:
    return hash_password(DEFAULT_PASSWORD)


async def insert_user(username: str, role: Role | str = Role.PLAYER, banned: bool = False) -> int:
    """Store an account with DEFAULT_PASSWORD; ``role`` may be a legacy label."""
    async with AsyncSessionLocal() as db:
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=_default_password_hash(),
            role=role.value if isinstance(role, Role) else role,
            banned=banned,
        )
        db.add(user)
        await db.commit()
        return user.id


def _bearer(user_id: int | str, role: Role | str, username: str) -> dict:
    token = create_access_token(
        {"sub": user_id, "username": username, "role": role},
        expires_delta=timedelta(minutes=30),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Factory building Authorization headers for an arbitrary identity."""

    def build(user_id: int | str = 1, role: Role | str = Role.PLAYER, username: str = "tester") -> dict:
        return _bearer(user_id, role, username)

    return build


@pytest.fixture
def create_user(setup_test_database):
    """Insert an account directly and return its id."""

    def do_create(username: str, role: Role | str = Role.PLAYER, banned: bool = False) -> int:
        return asyncio.run(insert_user(username, role, banned))

    return do_create


@pytest.fixture
def player_headers(create_user) -> dict:
    return _bearer(create_user("player"), Role.PLAYER, "player")


@pytest.fixture
def game_master_headers(create_user) -> dict:
    return _bearer(create_user("gamemaster", Role.GAME_MASTER), Role.GAME_MASTER, "gamemaster")


@pytest.fixture
def admin_headers(create_user) -> dict:
    return _bearer(create_user("admin", Role.ADMIN), Role.ADMIN, "admin")


@pytest.fixture
def register():
    """Register a Player account through the API and return its JSON."""

    def do_register(client: TestClient, username: str, password: str = DEFAULT_PASSWORD) -> dict:
        response = client.post(
            "/api/auth/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return do_register


@pytest.fixture
def login():
    """Attempt a login through the API and return the raw response."""

    def do_login(client: TestClient, username: str, password: str = DEFAULT_PASSWORD):
        return client.post("/api/auth/login", json={"email": f"{username}@example.com", "password": password})

    return do_login
