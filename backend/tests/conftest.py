"""
Daygrid Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the whole suite.

Fixture Overview:
    Unit tests (no database):
    ├── mock_db_session:   AsyncMock standing in for AsyncSession
    ├── make_profile:      factory for detached Profile rows
    ├── temp_storage:      temporary storage directory
    └── sample_image_bytes / sample_png_bytes

    API tests (temporary SQLite database):
    ├── database:          creates all tables, drops them afterwards
    ├── skip_mime_sniffing: patches libmagic detection to "image/jpeg"
    ├── test_client:       httpx AsyncClient over ASGITransport
    └── signup:            helper that registers a user and returns auth headers
"""

import os
import tempfile
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

# Override settings BEFORE any daygrid import; Settings() is built at import
_TEST_DIR = tempfile.mkdtemp(prefix="daygrid_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "storage")
os.environ["JWT_SECRET"] = "test-secret-not-for-production-use-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from daygrid.database import Base, engine
from daygrid.models import Profile


# ══════════════════════════════════════════════════════════════════════════
# Unit Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = post
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_profile():
    """Build a Profile that is not attached to any session."""

    def _make(
        tasks: Optional[list] = None,
        daily_images: Optional[list] = None,
        username: str = "jane_ab12",
    ) -> Profile:
        return Profile(
            id=uuid4(),
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            username=username,
            tasks=list(tasks or []),
            daily_images=list(daily_images or []),
        )

    return _make


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """
    Minimal JPEG bytes: SOI marker + JFIF header + EOI marker.

    Not a decodable photo, but libmagic reports image/jpeg for it.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """PNG signature followed by an IHDR chunk header."""
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02\x00\x00\x00"


# ══════════════════════════════════════════════════════════════════════════
# API Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """Fresh tables for one test; the pool is disposed so no connection outlives its loop."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def skip_mime_sniffing():
    """Uploads skip libmagic, which may be missing from the test machine."""
    from daygrid.services.file_service import file_service

    with patch.object(file_service, "validate_mime_type", return_value="image/jpeg"):
        yield


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to a fresh app over ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from daygrid.main import create_app

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def signup(test_client):
    """
    Register an account and return its auth context.

    Usage:
        alice = await signup("alice@example.com")
        await test_client.get("/api/tasks", headers=alice["headers"])
    """

    async def _signup(
        email: str,
        password: str = "secret123",
        username: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"email": email, "password": password}
        if username is not None:
            body["username"] = username
        response = await test_client.post("/api/auth/signup", json=body)
        assert response.status_code == 201, response.text
        tokens = response.json()
        return {
            "user_id": tokens["user_id"],
            "tokens": tokens,
            "headers": {"Authorization": f"Bearer {tokens['access_token']}"},
        }

    return _signup
