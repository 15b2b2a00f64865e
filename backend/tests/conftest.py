"""
Inkpost Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    db_engine ── in-memory SQLite (aiosqlite + StaticPool), tables created
    └── session_factory
        ├── db_session: a session for repository tests
        └── application: fresh create_app() with get_db_session and
            get_asset_storage overridden
            └── client_factory / client: httpx AsyncClient over ASGITransport
    temp_storage ── asset_storage: LocalAssetStorage in a tmp directory
    sample_png_bytes / sample_gif_bytes / sample_html_bytes: upload payloads
    identity_factory: SessionClaims for unit tests
    login_as: register + login helper for API tests

Clients use https://test so that Secure cookies are sent back.
"""

import os
import tempfile

# Settings are read at import time; these must be set before any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="inkpost_test_")
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers tables with Base.metadata)
from app.database import Base, build_session_factory, get_db_session
from app.dependencies import get_asset_storage
from app.security.tokens import SessionClaims
from app.services.asset_storage import LocalAssetStorage

TEST_MAX_FILE_SIZE = 1024 * 1024

# Smallest valid PNG: signature + IHDR + IDAT + IEND for a 1x1 pixel
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)

# 1x1 GIF89a
GIF_BYTES = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00"
    b"!\xf9\x04\x01\x00\x00\x00\x00,\x00\x00\x00\x00\x01\x00\x01\x00\x00"
    b"\x02\x02D\x01\x00;"
)

HTML_BYTES = b"<!DOCTYPE html>\n<html><body><script>alert(document.cookie)</script></body></html>\n"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite shared by every connection of the test (StaticPool),
    so sessions opened by different requests see the same data.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Storage
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    """A fresh cover directory for each test."""
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def asset_storage(temp_storage):
    return LocalAssetStorage(root=temp_storage, max_size=TEST_MAX_FILE_SIZE)


@pytest.fixture
def sample_png_bytes():
    return PNG_BYTES


@pytest.fixture
def sample_gif_bytes():
    return GIF_BYTES


@pytest.fixture
def sample_html_bytes():
    """Markup that a client might try to pass off as an image."""
    return HTML_BYTES


# ══════════════════════════════════════════════════════════════════════════
# Identities
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def identity_factory():
    """Build verified-looking identities without going through a token."""

    def make(username: str = "alice", user_id=None) -> SessionClaims:
        return SessionClaims(username=username, user_id=user_id or uuid.uuid4())

    return make


# ══════════════════════════════════════════════════════════════════════════
# Application & HTTP Clients
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def application(session_factory, asset_storage):
    """
    A fresh app per test: its own rate limiter, its own dependency overrides.
    Lifespan does not run under ASGITransport, so the shared engine is never
    disposed by a test.
    """
    from app.main import create_app

    instance = create_app()

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    instance.dependency_overrides[get_db_session] = override_db_session
    instance.dependency_overrides[get_asset_storage] = lambda: asset_storage
    return instance


@pytest_asyncio.fixture
async def client_factory(application):
    """
    Independent clients (independent cookie jars) against the same app,
    one per simulated user.

    Usage:
        alice = client_factory()
        bob = client_factory()
    """
    clients = []

    def make() -> AsyncClient:
        client = AsyncClient(
            transport=ASGITransport(app=application),
            base_url="https://test",
        )
        clients.append(client)
        return client

    yield make

    for client in clients:
        await client.aclose()


@pytest.fixture
def client(client_factory):
    return client_factory()


@pytest.fixture
def login_as():
    """
    Register (if needed) and sign in; the session cookie lands in the
    client's jar.

    Usage:
        me = await login_as(client, "alice")
    """

    async def do_login(client: AsyncClient, username: str, password: str = "correct horse"):
        await client.post(
            "/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        response = await client.post(
            "/login",
            json={"username": username, "password": password},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return do_login
