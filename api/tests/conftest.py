"""
Shared test fixtures for Church Social API tests.

Provides database session management, a recording Socket.IO server, the
gateway built on it, test clients, and user fixtures.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from church_social.config import settings
from church_social.database import Base, get_db
from church_social.main import app
from church_social.middleware.rate_limit import reset_limiter
from church_social.realtime.dependencies import get_gateway
from church_social.realtime.gateway import Gateway
from church_social.services import fanout
from church_social.services.accounts import create_user, issue_api_key

# Import models so they're registered with Base.metadata before table creation
import church_social.models  # noqa: F401

# Test database URL (uses separate test database)
TEST_DATABASE_URL = settings.test_database_url

# Create test engine with NullPool to avoid connection issues
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,
    echo=False,
)

TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


# --- Rate Limiter Reset Fixture ---


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Reset rate limiter before each test to ensure test isolation."""
    reset_limiter()
    yield


# --- Real-time Fixtures ---


@dataclass
class EmittedEvent:
    event: str
    data: Any
    to: str | None


class FakeSocketServer:
    """Stands in for ``socketio.AsyncServer`` and records every emit."""

    def __init__(self):
        self.emitted: list[EmittedEvent] = []
        self.failing_sids: set[str] = set()

    async def emit(self, event: str, data: Any = None, to: str | None = None, **kwargs: Any) -> None:
        if to is not None and to in self.failing_sids:
            raise ConnectionError(f"transport for {to} is closed")
        self.emitted.append(EmittedEvent(event=event, data=data, to=to))

    def sent(self, event: str, to: str | None = ...) -> list[EmittedEvent]:
        """Emits of ``event``, optionally only those addressed to ``to``."""
        return [
            e for e in self.emitted
            if e.event == event and (to is ... or e.to == to)
        ]

    def clear(self) -> None:
        self.emitted.clear()


@pytest.fixture
def socket_server() -> FakeSocketServer:
    return FakeSocketServer()


@pytest.fixture
def gateway(socket_server: FakeSocketServer) -> Gateway:
    return Gateway(socket_server)


@pytest.fixture
def go_online(gateway: Gateway, socket_server: FakeSocketServer):
    """Connect and register a user on a socket, then clear recorded emits."""

    async def _go_online(user: dict[str, Any], sid: str) -> str:
        gateway.connect(sid)
        await gateway.register(user["user_id"], sid)
        socket_server.clear()
        return sid

    return _go_online


@pytest.fixture
def failing_notification_insert(monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the fan-out bulk insert at a missing table so the write fails."""
    monkeypatch.setattr(
        fanout,
        "insert",
        lambda _model: text("INSERT INTO missing_notifications (title) VALUES (:title)"),
    )


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create tables before each test function, drop after.
    Provides isolated database state per test.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def async_client(
    db_session: AsyncSession, gateway: Gateway
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client configured for testing.
    Overrides the database and gateway dependencies.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True,
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Authentication Helper Fixtures ---


@pytest.fixture
def auth_headers():
    """Factory fixture for creating X-API-Key headers."""

    def _auth_headers(api_key: str) -> dict[str, str]:
        return {"X-API-Key": api_key}

    return _auth_headers


# --- User Fixtures ---


async def _create_user(
    db_session: AsyncSession,
    email: str,
    first_name: str,
    last_name: str,
    role: str = "member",
) -> dict[str, Any]:
    """Helper to create a user with an API key in the database."""
    user = await create_user(
        db_session,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    api_key = await issue_api_key(db_session, user.id, name="Test key")

    return {
        "user_id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
        "api_key": api_key,
    }


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Factory fixture for extra users: ``await make_user("Ann", role="pastor")``."""

    async def _make_user(first_name: str, role: str = "member", last_name: str = "Test") -> dict[str, Any]:
        return await _create_user(
            db_session,
            email=f"{first_name.lower()}@example.com",
            first_name=first_name,
            last_name=last_name,
            role=role,
        )

    return _make_user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> dict[str, Any]:
    """
    Create a standard member with an API key.

    Returns dict with user data and plaintext API key.
    """
    return await _create_user(db_session, "test@example.com", "Mary", "Member")


@pytest_asyncio.fixture
async def second_user(db_session: AsyncSession) -> dict[str, Any]:
    """Create a second member for ownership/authorization scenarios."""
    return await _create_user(db_session, "second@example.com", "John", "Second")


@pytest_asyncio.fixture
async def pastor_user(db_session: AsyncSession) -> dict[str, Any]:
    return await _create_user(db_session, "pastor@example.com", "Paul", "Pastor", role="pastor")


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession) -> dict[str, Any]:
    return await _create_user(db_session, "admin@example.com", "Ada", "Admin", role="admin")
