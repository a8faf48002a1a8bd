"""Seed the database with a sample provider and four weeks of weekday slots.

Usage:
    python -m scheduling_assistant.seed
"""

import asyncio
import random
from datetime import date, datetime, time, timedelta, timezone as dt_timezone

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from scheduling_assistant.database import close_db, get_sessionmaker, init_db, utcnow
from scheduling_assistant.models import Appointment, Provider, Slot
from scheduling_assistant.services.provider_service import ProviderService
from scheduling_assistant.timeutils import get_zone

SAMPLE_PROVIDER_NAME = "Sample Provider"
SEED_DAYS = 28
FIRST_START_HOUR = 8
LAST_START_HOUR = 17


def generate_slots(
    today: date,
    rng: random.Random,
    days: int = SEED_DAYS,
    timezone: str | None = None,
) -> list[tuple[datetime, datetime]]:
    """(start, end) pairs in UTC, sorted by start.

    Weekends are skipped. Each weekday has a 50% chance of 1-4 slots with
    distinct whole-hour starts between 08:00 and 17:00 local time, each
    lasting one or two hours.
    """
    zone = get_zone(timezone)
    windows = []

    for offset in range(days):
        day = today + timedelta(days=offset)
        if day.weekday() >= 5:
            continue
        if rng.random() >= 0.5:
            continue

        count = rng.randint(1, 4)
        for hour in rng.sample(range(FIRST_START_HOUR, LAST_START_HOUR + 1), count):
            start = datetime.combine(day, time(hour), tzinfo=zone)
            end = start + timedelta(hours=rng.randint(1, 2))
            windows.append((start.astimezone(dt_timezone.utc), end.astimezone(dt_timezone.utc)))

    return sorted(windows)


async def seed_database(
    db: AsyncSession,
    rng: random.Random | None = None,
    today: date | None = None,
) -> tuple[Provider, list[Slot]]:
    """Replace all data with one sample provider and its generated slots."""
    rng = rng or random.Random()
    today = today or utcnow().astimezone(get_zone()).date()

    await db.execute(delete(Slot))
    await db.execute(delete(Appointment))
    await db.execute(delete(Provider))

    provider = await ProviderService(db).create_provider(SAMPLE_PROVIDER_NAME, get_zone().key)
    slots = [
        Slot(provider_id=provider.id, start_time=start, end_time=end, is_available=True)
        for start, end in generate_slots(today, rng, timezone=provider.timezone)
    ]
    db.add_all(slots)
    await db.commit()
    return provider, slots


async def main():
    await init_db()
    try:
        async with get_sessionmaker()() as session:
            provider, slots = await seed_database(session)
            print(f"✅ Seeded provider {provider.id} ({provider.name}) with {len(slots)} slots")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
