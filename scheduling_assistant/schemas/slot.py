from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date, time

from scheduling_assistant.timeutils import coerce_date, coerce_time


class SlotQuery(BaseModel):
    """Filters for the availability query. Every field is optional."""
    provider_id: int | None = Field(None, description="Only slots of this provider")
    start_date: date | None = Field(None, description="Inclusive first day (YYYY-MM-DD)")
    end_date: date | None = Field(None, description="Inclusive last day (YYYY-MM-DD)")
    start_time: time | None = Field(None, description="Earliest start time of day (HH:mm, 24h)")
    end_time: time | None = Field(None, description="Latest start time of day (HH:mm, 24h)")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def validate_date(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return coerce_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return coerce_time(value)


class SlotResponse(BaseModel):
    """Schema for an open slot."""
    id: int
    provider_id: int
    start_time: datetime
    end_time: datetime
    is_available: bool

    class Config:
        from_attributes = True


class ScheduleEntry(BaseModel):
    """One open slot inside a schedule day."""
    slot_id: int
    provider_id: int
    time: str = Field(..., description="Local start time (HH:mm)")
    start_time: datetime
    end_time: datetime


class ScheduleDay(BaseModel):
    date: date
    weekday: str
    slots: list[ScheduleEntry] = Field(default_factory=list)


class WeekSchedule(BaseModel):
    """Open slots for one Monday-to-Sunday week, grouped by local day."""
    week_start: date
    week_end: date
    days: list[ScheduleDay]
