"""
TravelStory Backend - Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Every test gets its own SQLite database and uploads directory, so
       tests never share state and never need PostgreSQL.
How:   Environment is set BEFORE any travelstory import (settings and the
       module-level singletons read it at import time). The schema is
       created from Base.metadata rather than the Alembic migration.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:       aiosqlite engine on a per-test file, schema created
    ├── session_factory: async_sessionmaker bound to db_engine
    ├── db_session:      one AsyncSession for store/service tests
    ├── temp_storage:    temporary uploads directory
    ├── image_service:   ImageService writing into temp_storage
    ├── token_service:   TokenService with the test secret
    ├── sample_image_bytes
    └── test_client:     HTTPX AsyncClient wired to a fresh app, with the
                         DB session and image service overridden
"""

import os
import tempfile
from typing import AsyncGenerator

# Override settings for testing BEFORE any app imports
_TEST_ROOT = tempfile.mkdtemp(prefix="travelstory_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/default.db"
os.environ["ACCESS_TOKEN_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum cost keeps the suite fast
os.environ["UPLOADS_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["ASSETS_DIR"] = os.path.join(_TEST_ROOT, "assets")
os.environ["BASE_URL"] = "http://test"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from travelstory.database import Base, build_engine, build_session_factory, get_db_session
from travelstory.dependencies import get_image_service
from travelstory.services.image_service import ImageService
from travelstory.services.token_service import TokenService

import travelstory.models  # noqa: F401  (registers tables on Base.metadata)

TEST_SECRET = os.environ["ACCESS_TOKEN_SECRET"]


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database per test with the full schema."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator:
    """
    A single session for store and service tests.

    Stores mostly flush, so everything a test writes is visible to the same
    session. Story deletion commits; the database file is per test anyway.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


# ══════════════════════════════════════════════════════════════════════════
# Storage & Token Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    """Temporary uploads directory, removed by pytest afterwards."""
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def image_service(temp_storage):
    return ImageService(uploads_dir=temp_storage, public_prefix="http://test/uploads")


@pytest.fixture
def token_service():
    return TokenService(secret=TEST_SECRET)


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: Start of Image (FFD8) + JFIF marker + End of Image (FFD9)."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, image_service):
    """
    HTTPX AsyncClient talking to a freshly built app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from travelstory.main import create_app

    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_image_service] = lambda: image_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_user(test_client):
    """
    Create an account through the API and return its Authorization header.

    Usage:
        headers = await register_user("Ann", "ann@x.io", "pw1")
        await test_client.get("/get-user", headers=headers)
    """

    async def _register(full_name: str, email: str, password: str) -> dict:
        response = await test_client.post(
            "/create-account",
            json={"fullName": full_name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['accessToken']}"}

    return _register
