"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB sessions
    - db_manager patched so readiness probes see the test engine
    - Reads in assertions go through a fresh session (no stale identity map)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - Concurrency tests use a file-backed SQLite (see file_session_factory): each
      session needs its own connection for the database to arbitrate writers
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from spex.api.dependencies import get_codec
from spex.config import get_settings
from spex.db.base import Base
from spex.infrastructure.database import get_db, DatabaseSessionManager
from spex.models.card import Card
from spex.services.card_store import CardStore
import spex.infrastructure.database as db_module
import spex.models  # noqa: F401
from spex.main import app

@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": get_settings().admin_key}


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
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
async def file_session_factory(tmp_path):
    """Session factory over a file database: one connection per session."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'cards.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def codec():
    return get_codec()


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


@pytest.fixture
async def blank_card(test_db):
    """Insert an unclaimed card."""
    card = Card(uid="blank00001")
    test_db.add(card)
    await test_db.commit()
    return card


@pytest.fixture
def fetch_card(test_session_factory):
    """Read a card through a fresh session."""
    async def _fetch(uid: str) -> Card | None:
        async with test_session_factory() as session:
            return await CardStore(session).get(uid)
    return _fetch
