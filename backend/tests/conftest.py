"""
ResilienceHub Backend — Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock standing in for AsyncSession (unit tests)
    ├── db_engine:       in-memory SQLite engine with the full schema
    ├── db_session:      session for seeding and inspecting rows
    ├── app:             fresh FastAPI app with get_db_session overridden
    ├── client:          HTTPX AsyncClient over ASGITransport
    └── seed:            factory for users and sessions (see Seeder)
"""

import os
from datetime import timedelta
from typing import Dict, Optional
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any resilience_hub imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["AUTH_RATE_LIMIT_REQUESTS"] = "100000"
os.environ["SESSION_CACHE_ENABLED"] = "true"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from resilience_hub.config import settings
from resilience_hub.database import Base, get_db_session, utcnow
from resilience_hub.main import create_app
from resilience_hub.models import Role, Session, User, UserStatus
from resilience_hub.services.passwords import hash_password
from resilience_hub.services.session_store import SessionStore

DEFAULT_PASSWORD = "s3cret-pass"


# ══════════════════════════════════════════════════════════════════════════
# Unit-test doubles
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        async def test_x(mock_db_session):
            mock_db_session.get.return_value = user
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    # StaticPool: every session shares the one in-memory connection
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Application & HTTP client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory):
    application = create_app()

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ══════════════════════════════════════════════════════════════════════════
# Seeding
# ══════════════════════════════════════════════════════════════════════════

class Seeder:
    """Creates users and session rows directly through the ORM."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._count = 0

    async def user(
        self,
        role: Role = Role.CLIENT,
        therapist_id: Optional[int] = None,
        username: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        status: UserStatus = UserStatus.ACTIVE,
        user_id: Optional[int] = None,
    ) -> User:
        self._count += 1
        username = username or f"{role.value}{self._count}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            password=hash_password(password),
            name=username.title(),
            role=role.value,
            status=status.value,
            therapist_id=therapist_id,
        )
        if user_id is not None:
            user.id = user_id
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def admin(self, **kwargs) -> User:
        return await self.user(Role.ADMIN, **kwargs)

    async def therapist(self, **kwargs) -> User:
        return await self.user(Role.THERAPIST, **kwargs)

    async def client(self, therapist: Optional[User] = None, **kwargs) -> User:
        therapist_id = therapist.id if therapist is not None else kwargs.pop("therapist_id", None)
        return await self.user(Role.CLIENT, therapist_id=therapist_id, **kwargs)

    async def session_for(self, user: User, remember: bool = False) -> str:
        session = await SessionStore(self.db).create(user.id, remember=remember)
        return session.id

    async def expired_session(self, user: User, token: str = "expired-token") -> str:
        self.db.add(Session(id=token, user_id=user.id, expires_at=utcnow() - timedelta(hours=1)))
        await self.db.commit()
        return token

    @staticmethod
    def headers(token: str) -> Dict[str, str]:
        """Cookie header carrying a session token."""
        return {"Cookie": f"{settings.session_cookie_name}={token}"}

    async def login(self, user: User) -> Dict[str, str]:
        return self.headers(await self.session_for(user))


@pytest.fixture
def seed(db_session) -> Seeder:
    return Seeder(db_session)
