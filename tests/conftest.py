import os
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["TIMEZONE"] = "America/New_York"
os.environ["OPENAI_API_KEY"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["LOGFIRE_TOKEN"] = ""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from scheduling_assistant import models  # noqa: E402,F401
from scheduling_assistant.database import Base  # noqa: E402
from scheduling_assistant.models import Provider, Slot  # noqa: E402

# Monday 2025-01-13, 09:00 in New York
NOW = datetime(2025, 1, 13, 14, 0, tzinfo=timezone.utc)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def provider(db):
    provider = Provider(name="Dr. Rivera", timezone="America/New_York")
    db.add(provider)
    await db.commit()
    return provider


@pytest.fixture
def make_slot(db, provider):
    """Create a slot from a provider-local ``YYYY-MM-DD HH:mm`` start."""

    async def _make_slot(local_start: str, hours: int = 1, is_available: bool = True, owner=None) -> Slot:
        owner = owner or provider
        start = datetime.strptime(local_start, "%Y-%m-%d %H:%M").replace(tzinfo=ZoneInfo(owner.timezone))
        slot = Slot(
            provider=owner,
            start_time=start.astimezone(timezone.utc),
            end_time=(start + timedelta(hours=hours)).astimezone(timezone.utc),
            is_available=is_available,
        )
        db.add(slot)
        await db.commit()
        return slot

    return _make_slot
