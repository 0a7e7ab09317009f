import pytest
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from fantasy_ingest.config import Settings
from fantasy_ingest.database import Base
from fantasy_ingest.models import Role


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Note: Using pytest-asyncio's built-in event_loop fixture (asyncio_mode = auto)


@pytest.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture(scope="function")
async def test_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def test_settings() -> Settings:
    """Settings with every pause disabled."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        leaguepedia_bot_username="",
        leaguepedia_bot_password="",
        provider_min_interval_ms=0,
        provider_backoff_base_seconds=0,
        stats_call_delay_seconds=0,
        inter_match_delay_seconds=0,
        inter_region_delay_seconds=0,
        poll_regions=["LPL", "LCK"],
    )


# --- Data Fixtures ---

@pytest.fixture
async def roles(test_session) -> list[Role]:
    """Seed the five lane roles."""
    items = [
        Role(id=1, name="Top Laner", short_name="Top"),
        Role(id=2, name="Jungler", short_name="Jungle"),
        Role(id=3, name="Mid Laner", short_name="Mid"),
        Role(id=4, name="Bot Laner", short_name="Bot"),
        Role(id=5, name="Support", short_name="Support"),
    ]
    test_session.add_all(items)
    await test_session.commit()
    return items
