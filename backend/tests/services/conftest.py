"""Service test fixtures — async DB, seeded projects, runtime with fakes, FastAPI client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db and get_runtime dependencies overridden for route tests
    - db_manager patched so background tasks (project deletion) hit the test DB
    - No oracle is configured unless the test passes a fake into make_runtime

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for ledger semantics
    - Seeded RNG: random fill is reproducible across runs
"""

import random

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from fango.config import Settings
from fango.core.documents import NewHouse
from fango.db.base import Base
from fango.infrastructure.database import get_db, DatabaseSessionManager
from fango.infrastructure.runtime import RecommendationRuntime, get_runtime
from fango.models.project import Project
from fango.services.item_store import ItemStore
import fango.infrastructure.database as db_module
from fango.main import app


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
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        anthropic_api_key="",
        similarity_server_url="",
        external_search_url="",
        similarity_strategy_timeout_seconds=0.5,
        llm_strategy_timeout_seconds=0.5,
    )


@pytest.fixture
def make_runtime(test_settings):
    """Build a runtime around the given fakes (None = oracle not configured)."""
    def _make(similarity_oracle=None, text_oracle=None, seed: int = 7):
        return RecommendationRuntime(
            test_settings,
            similarity_oracle=similarity_oracle,
            text_oracle=text_oracle,
            rng=random.Random(seed),
        )
    return _make


@pytest.fixture
def runtime(make_runtime):
    return make_runtime()


@pytest.fixture
def add_houses(test_db):
    """Insert `count` houses named {prefix}00.. and commit."""
    async def _add(project_id, count: int, prefix: str = "h") -> list[str]:
        ids = [f"{prefix}{i:02d}" for i in range(count)]
        await ItemStore(test_db).add_items(project_id, [
            NewHouse(id=i, filename=f"{i}.pdf", content=f"物件 {i} の詳細")
            for i in ids
        ])
        await test_db.commit()
        return ids
    return _add


@pytest.fixture
async def project(test_db):
    """Empty project with requirements."""
    p = Project(name="テスト案件", requirements="駅近、2LDK、予算5000万円以内")
    test_db.add(p)
    await test_db.commit()
    await test_db.refresh(p)
    return p


@pytest.fixture
async def project_with_houses(project, add_houses):
    """Project holding 25 houses h00..h24."""
    await add_houses(project.id, 25)
    return project


@pytest.fixture
async def client(test_engine, test_session_factory, runtime):
    """FastAPI test client with DB and runtime dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_runtime] = lambda: runtime

    # Patch db_manager for background tasks that use it directly
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
