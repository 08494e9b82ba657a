"""Global test configuration and fixtures for KeyGate API."""

import os
import tempfile
from collections.abc import AsyncGenerator

_TEST_DB_DIR = tempfile.mkdtemp(prefix="keygate_test_")
ROOT_SECRET = "root-secret-for-tests-only"

# Settings are read when src modules are imported, so the environment has to
# be in place first.
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_DIR}/test.db"
os.environ["ADMIN_API_KEY"] = ROOT_SECRET
os.environ["ENVIRONMENT"] = "TEST"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from asgi_lifespan import LifespanManager  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession  # noqa: E402

from src.database.models import ApiKey, Base  # noqa: E402
from src.modules.keys.api_keys import ApiKeyStore  # noqa: E402
from tests.factories import ApiKeyFactory  # noqa: E402

BASE_URL = "http://test-keygate-api"


@pytest.fixture
def api_key_factory():
    return ApiKeyFactory


@pytest.fixture
def root_secret() -> str:
    return ROOT_SECRET


@pytest_asyncio.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Application engine with a freshly created schema for every test."""
    from src.database.connection import async_engine as engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    # Pooled connections belong to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session on the application's session factory."""
    from src.database.connection import AsyncSessionLocal

    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def store(db_session: AsyncSession) -> ApiKeyStore:
    return ApiKeyStore(db_session)


@pytest_asyncio.fixture
async def app(async_engine) -> AsyncGenerator[FastAPI, None]:
    """Create FastAPI application with lifespan manager for testing."""
    from src.main import app

    async with LifespanManager(app):
        yield app


# Test Data Fixtures
@pytest_asyncio.fixture
async def test_api_key(
    db_session: AsyncSession, api_key_factory
) -> tuple[ApiKey, str]:
    """A full-access key (permissions ["*"])."""
    return await api_key_factory.create_with_secret(db_session, name="Full Access")


@pytest_asyncio.fixture
async def read_only_key(
    db_session: AsyncSession, api_key_factory
) -> tuple[ApiKey, str]:
    """A key without any admin scope."""
    return await api_key_factory.create_with_secret(
        db_session, name="Read Only", permissions=["read"]
    )


@pytest_asyncio.fixture
async def admin_scoped_key(
    db_session: AsyncSession, api_key_factory
) -> tuple[ApiKey, str]:
    """A key carrying the explicit admin scope."""
    return await api_key_factory.create_with_secret(
        db_session, name="Ops Admin", permissions=["admin:*", "read"]
    )


# HTTP Client Fixtures
@pytest_asyncio.fixture
async def public_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP client without credentials."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP client authorized with the root secret."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=BASE_URL,
        headers={"Authorization": f"Bearer {ROOT_SECRET}"},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def api_key_client(
    app: FastAPI, test_api_key: tuple[ApiKey, str]
) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP client authorized with a full-access key."""
    _, plain_key = test_api_key
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=BASE_URL,
        headers={"Authorization": f"Bearer {plain_key}"},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def read_only_client(
    app: FastAPI, read_only_key: tuple[ApiKey, str]
) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP client authorized with a key lacking admin scope."""
    _, plain_key = read_only_key
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=BASE_URL,
        headers={"Authorization": f"Bearer {plain_key}"},
    ) as ac:
        yield ac


@pytest.fixture
def client_factory(app: FastAPI):
    """Factory for creating HTTP clients that present a given bearer token."""

    def create_client(token: str | None) -> AsyncClient:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return AsyncClient(
            transport=ASGITransport(app=app), base_url=BASE_URL, headers=headers
        )

    return create_client
