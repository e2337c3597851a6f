"""
Shared fixtures: a throwaway SQLite database per test, seeded users and pets,
and an httpx client wired to the FastAPI app.
"""

import os
from datetime import UTC, datetime

# Settings are read at import time, configure before importing the app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENV"] = "testing"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

import petadopt.models  # noqa: F401 - register tables
from petadopt.api.deps import get_now
from petadopt.core.db import get_session
from petadopt.core.security import create_access_token
from petadopt.main import app
from petadopt.models.pet import Pet
from petadopt.models.user import ROLE_ADMIN, User

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def engine(tmp_path):
    # file database + NullPool: every session gets its own connection, like a real pool
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def users(session_maker):
    """owner (U1), other (U2) and admin."""
    async with session_maker() as s:
        owner = User(email="owner@example.com", first_name="Olive", last_name="Owner")
        other = User(email="other@example.com", first_name="Oscar", last_name="Other")
        admin = User(email="admin@example.com", first_name="Ada", role=ROLE_ADMIN)
        s.add_all([owner, other, admin])
        await s.commit()
        return {"owner": owner, "other": other, "admin": admin}


@pytest_asyncio.fixture
async def pets(session_maker):
    async with session_maker() as s:
        rex = Pet(name="Rex", type="Dog", breed="Beagle")
        tom = Pet(name="Tom", type="Cat", breed="Siamese")
        s.add_all([rex, tom])
        await s.commit()
        return {"rex": rex, "tom": tom}


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
