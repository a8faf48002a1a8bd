"""Slot routes - API endpoints for availability queries."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query

from scheduling_assistant.api.deps import DBSession
from scheduling_assistant.database import utcnow
from scheduling_assistant.schemas.slot import SlotQuery, SlotResponse, WeekSchedule
from scheduling_assistant.services.availability_service import AvailabilityService
from scheduling_assistant.timeutils import get_zone

router = APIRouter()


@router.get("", response_model=list[SlotResponse])
async def get_available_slots(query: Annotated[SlotQuery, Query()], db: DBSession):
    """Get open slots matching the given filters, earliest first."""
    service = AvailabilityService(db)
    return await service.get_available_slots(query)


@router.get("/week", response_model=WeekSchedule)
async def get_week_schedule(db: DBSession, week_of: date | None = None, provider_id: int | None = None):
    """Get open slots grouped by day for the week containing ``week_of`` (default: this week)."""
    service = AvailabilityService(db)
    return await service.get_week_schedule(week_of or utcnow().astimezone(get_zone()).date(), provider_id)
