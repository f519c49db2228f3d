# tests/conftest.py
import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from salesops.db import get_session
from salesops.entrypoints.fastapi_app import create_app
from salesops.models import Base, User, UserRole


@pytest.fixture(autouse=True)
async def _reset_db(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
async def users(async_session_maker):
    async with async_session_maker() as session:
        head = User(username="head", name="Head", role=UserRole.HEAD)
        sdr1 = User(username="sdr1", name="Ana", role=UserRole.SDR)
        sdr2 = User(username="sdr2", name="Bruno", role=UserRole.SDR)
        session.add_all([head, sdr1, sdr2])
        await session.commit()
        return {"head": head, "sdr1": sdr1, "sdr2": sdr2}


@pytest.fixture
async def client(async_session_maker):
    app = create_app()

    async def _session_override():
        async with async_session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _session_override

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
