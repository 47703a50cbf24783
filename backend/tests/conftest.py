"""Root conftest — shared test configuration, async DB, and FastAPI test client.

Invariants:
    - Env defaults set before any dotareplays import reads settings
    - Every test gets a fresh in-memory SQLite database with permission codes seeded
    - get_db dependency overridden to use the test DB session
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency; stores branch on dialect for
      the PostgreSQL-only operators (full-text search, array containment)
    - bcrypt cost 4: the minimum bcrypt accepts, keeps the suite fast
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_COST", "4")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("LIMITER_ENABLED", "false")

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import dotareplays.infrastructure.database as db_module
from dotareplays.core.domain_types import PermissionCode, Replay, TokenScope, User
from dotareplays.db.base import Base
from dotareplays.infrastructure.database import DatabaseSessionManager, get_db
from dotareplays.main import app
from dotareplays.models.permission import PermissionModel
from dotareplays.services.permission_store import PermissionStore
from dotareplays.services.replay_store import ReplayStore
from dotareplays.services.token_store import TokenStore
from dotareplays.services.user_store import UserStore

TEST_BCRYPT_COST = 4
HEROES = [
    "Axe", "Lina", "Pudge", "Sven", "Zeus",
    "Tiny", "Lion", "Viper", "Razor", "Mirana",
]


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(
            insert(PermissionModel),
            [{"code": code.value} for code in PermissionCode],
        )
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Stores ──────────────────────────────────────────────────────

@pytest.fixture
def replays(test_db):
    return ReplayStore(test_db)


@pytest.fixture
def users(test_db):
    return UserStore(test_db)


@pytest.fixture
def tokens(test_db):
    return TokenStore(test_db)


@pytest.fixture
def permissions(test_db):
    return PermissionStore(test_db)


# ─── Builders ────────────────────────────────────────────────────

def make_replay(title="The International Grand Final", year=2019, runtime=45, heroes=None):
    return Replay(
        title=title, year=year, runtime=runtime,
        heroes=list(HEROES if heroes is None else heroes),
    )


def make_user(name="Alice", email="alice@example.com", password="pa55word!", activated=False):
    user = User(name=name, email=email, activated=activated)
    user.credential.set(password, TEST_BCRYPT_COST)
    return user


@pytest.fixture
def auth_header(users, tokens, permissions):
    """Factory: persist a user with the given codes, return a bearer header."""
    counter = {"n": 0}

    async def _make(*codes: PermissionCode, activated: bool = True) -> dict:
        counter["n"] += 1
        user = await users.insert(make_user(
            name=f"user{counter['n']}",
            email=f"user{counter['n']}@example.com",
            activated=activated,
        ))
        if codes:
            await permissions.add_for_user(user.id, *codes)
        token = await tokens.new(user.id, timedelta(hours=1), TokenScope.AUTHENTICATION)
        return {"Authorization": f"Bearer {token.plaintext}"}

    return _make


@pytest.fixture
def new_replay():
    return make_replay


@pytest.fixture
def new_user():
    return make_user
