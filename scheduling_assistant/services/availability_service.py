"""Availability service - Open-slot queries over the slot store."""

import logging
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scheduling_assistant.database import utcnow
from scheduling_assistant.exceptions import InputValidationError
from scheduling_assistant.models.slot import Slot
from scheduling_assistant.schemas.slot import SlotQuery, ScheduleDay, ScheduleEntry, WeekSchedule
from scheduling_assistant.timeutils import format_time, get_zone, parse_local_datetime

logger = logging.getLogger(__name__)

# UTC offsets stay within +/-14h, so widening the SQL window by a day keeps
# every slot whose local day could match. The exact check runs per slot.
DAY_MARGIN = timedelta(days=1)


def utc_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def slot_local_start(slot: Slot) -> datetime:
    """Slot start in its provider's local timezone. Requires ``slot.provider`` loaded."""
    return slot.start_time.astimezone(get_zone(slot.provider.timezone))


def slot_local_end(slot: Slot) -> datetime:
    return slot.end_time.astimezone(get_zone(slot.provider.timezone))


def matches_query(slot: Slot, query: SlotQuery) -> bool:
    """Local-day and time-of-day checks for one slot, all bounds inclusive."""
    local_start = slot_local_start(slot)
    local_day = local_start.date()
    local_time = local_start.time()

    if query.start_date is not None and local_day < query.start_date:
        return False
    if query.end_date is not None and local_day > query.end_date:
        return False
    if query.start_time is not None and local_time < query.start_time:
        return False
    if query.end_time is not None and local_time > query.end_time:
        return False
    return True


class AvailabilityService:
    """Service class for availability queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _slots_query(open_only: bool = True):
        query = select(Slot).options(selectinload(Slot.provider))
        if open_only:
            query = query.where(
                Slot.is_available.is_(True),
                Slot.appointment_id.is_(None),
            )
        return query

    async def get_available_slots(
        self, query: SlotQuery | None = None, now: datetime | None = None
    ) -> list[Slot]:
        """Get open slots matching every supplied filter, earliest first.

        Without a start date the query starts at ``now``; past slots are only
        returned when the caller asks for their days explicitly.
        """
        query = query or SlotQuery()
        statement = self._slots_query()

        if query.provider_id is not None:
            statement = statement.where(Slot.provider_id == query.provider_id)

        if query.start_date is not None:
            statement = statement.where(Slot.start_time >= utc_midnight(query.start_date) - DAY_MARGIN)
        else:
            statement = statement.where(Slot.start_time >= (now or utcnow()))

        if query.end_date is not None:
            statement = statement.where(
                Slot.start_time < utc_midnight(query.end_date) + timedelta(days=1) + DAY_MARGIN
            )

        statement = statement.order_by(Slot.start_time, Slot.id)
        result = await self.db.execute(statement)
        slots = [slot for slot in result.scalars().all() if matches_query(slot, query)]

        logger.debug("Availability query %s matched %d slots", query.model_dump(exclude_none=True), len(slots))
        return slots

    async def find_slot_by_start(
        self, start: str, provider_id: int | None = None, open_only: bool = True
    ) -> Slot | None:
        """Resolve an exact local start (``YYYY-MM-DD HH:mm``) to a slot."""
        try:
            day, start_time = parse_local_datetime(start)
        except ValueError as exc:
            raise InputValidationError(str(exc), details={"start_time": start}) from exc

        statement = self._slots_query(open_only).where(
            Slot.start_time >= utc_midnight(day) - DAY_MARGIN,
            Slot.start_time < utc_midnight(day) + timedelta(days=1) + DAY_MARGIN,
        )
        if provider_id is not None:
            statement = statement.where(Slot.provider_id == provider_id)
        statement = statement.order_by(Slot.start_time, Slot.id)

        result = await self.db.execute(statement)
        for slot in result.scalars().all():
            local_start = slot_local_start(slot)
            if (
                local_start.date() == day
                and local_start.hour == start_time.hour
                and local_start.minute == start_time.minute
            ):
                return slot
        return None

    async def find_open_slot_by_start(self, start: str, provider_id: int | None = None) -> Slot | None:
        return await self.find_slot_by_start(start, provider_id, open_only=True)

    async def get_week_schedule(
        self,
        week_of: date,
        provider_id: int | None = None,
        now: datetime | None = None,
    ) -> WeekSchedule:
        """Open slots for the Monday-to-Sunday week containing ``week_of``."""
        now = now or utcnow()
        week_start = week_of - timedelta(days=week_of.weekday())
        week_end = week_start + timedelta(days=6)

        slots = await self.get_available_slots(
            SlotQuery(provider_id=provider_id, start_date=week_start, end_date=week_end),
            now=now,
        )

        days: dict[date, list[ScheduleEntry]] = {
            week_start + timedelta(days=offset): [] for offset in range(7)
        }
        for slot in slots:
            if slot.start_time < now:
                continue
            local_start = slot_local_start(slot)
            days[local_start.date()].append(
                ScheduleEntry(
                    slot_id=slot.id,
                    provider_id=slot.provider_id,
                    time=format_time(local_start),
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                )
            )

        return WeekSchedule(
            week_start=week_start,
            week_end=week_end,
            days=[
                ScheduleDay(date=day, weekday=day.strftime("%A"), slots=entries)
                for day, entries in days.items()
            ],
        )
