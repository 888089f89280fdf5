from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.api.dependencies import (
    get_cache,
    get_porter_client,
    get_reassigner,
    get_scheduler,
    get_session,
)
from app.cache import RestaurantCache
from app.db.base import Base
from app.main import app
from app.services.reassignment import BackgroundReassigner
from app.services.status_scheduler import RestaurantStatusScheduler
from tests.utils.fakes import FakePorterClient, FakeRedis, ReassignmentRecorder


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> RestaurantCache:
    return RestaurantCache(fake_redis)


@pytest.fixture
def porter_client() -> FakePorterClient:
    return FakePorterClient()


@pytest.fixture
def reassignment_recorder() -> ReassignmentRecorder:
    return ReassignmentRecorder()


@pytest_asyncio.fixture(scope="function")
async def scheduler(
    session_factory: async_sessionmaker[AsyncSession], cache: RestaurantCache
) -> AsyncGenerator[RestaurantStatusScheduler, None]:
    status_scheduler = RestaurantStatusScheduler(session_factory, cache)
    yield status_scheduler
    await status_scheduler.stop()


@pytest_asyncio.fixture(scope="function")
async def reassigner(
    session_factory: async_sessionmaker[AsyncSession],
    porter_client: FakePorterClient,
    reassignment_recorder: ReassignmentRecorder,
) -> AsyncGenerator[BackgroundReassigner, None]:
    background = BackgroundReassigner(
        session_factory,
        porter_client,
        timeout_seconds=5.0,
        on_complete=reassignment_recorder,
    )
    yield background
    await background.drain()


@pytest_asyncio.fixture(scope="function")
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    cache: RestaurantCache,
    scheduler: RestaurantStatusScheduler,
    porter_client: FakePorterClient,
    reassigner: BackgroundReassigner,
) -> AsyncGenerator[AsyncClient, None]:
    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    app.dependency_overrides[get_porter_client] = lambda: porter_client
    app.dependency_overrides[get_reassigner] = lambda: reassigner

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def sample_restaurant_id() -> str:
    return "res_test_001"


@pytest.fixture
def overnight_monday_hours() -> dict:
    return {"monday": {"is_open": True, "open_time": "22:00", "close_time": "04:00"}}
