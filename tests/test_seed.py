import random
from datetime import date, datetime, time, timedelta

from sqlalchemy import func, select

from scheduling_assistant.models import Appointment, Provider, Slot
from scheduling_assistant.seed import SAMPLE_PROVIDER_NAME, generate_slots, seed_database
from scheduling_assistant.timeutils import get_zone

MONDAY = date(2025, 1, 13)


def test_generated_slots_follow_the_seeding_rules():
    zone = get_zone("America/New_York")
    windows = generate_slots(MONDAY, random.Random(7), timezone="America/New_York")

    assert windows
    assert windows == sorted(windows)
    per_day: dict[date, list[datetime]] = {}
    for start, end in windows:
        local_start = start.astimezone(zone)
        assert start.utcoffset() == timedelta(0)
        assert MONDAY <= local_start.date() < MONDAY + timedelta(days=28)
        assert local_start.weekday() < 5
        assert time(8) <= local_start.time() <= time(17)
        assert local_start.minute == 0
        assert end - start in (timedelta(hours=1), timedelta(hours=2))
        per_day.setdefault(local_start.date(), []).append(local_start)

    for starts in per_day.values():
        assert 1 <= len(starts) <= 4
        assert len(set(starts)) == len(starts)


def test_generation_is_reproducible_with_a_seeded_rng():
    assert generate_slots(MONDAY, random.Random(3)) == generate_slots(MONDAY, random.Random(3))


async def test_seed_database_replaces_existing_data(db, make_slot):
    await make_slot("2025-01-14 09:00")

    seeded, slots = await seed_database(db, rng=random.Random(11), today=MONDAY)

    providers = (await db.execute(select(Provider))).scalars().all()
    assert [p.id for p in providers] == [seeded.id]
    assert seeded.name == SAMPLE_PROVIDER_NAME
    slot_count = await db.scalar(select(func.count()).select_from(Slot))
    assert slot_count == len(generate_slots(MONDAY, random.Random(11), timezone=seeded.timezone))
    assert slot_count == len(slots)
    assert {slot.provider_id for slot in slots} == {seeded.id}
    assert await db.scalar(select(func.count()).select_from(Appointment)) == 0
    open_count = await db.scalar(select(func.count()).select_from(Slot).where(Slot.is_available.is_(True)))
    assert open_count == slot_count
