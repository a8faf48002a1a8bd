"""Chat contract and the structured outputs requested from the LLM."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from scheduling_assistant.schemas.slot import SlotQuery
from scheduling_assistant.timeutils import parse_date, parse_time

Role = Literal["system", "user", "assistant"]


class OfferedSlot(BaseModel):
    """A slot presented to the user, expressed in the provider's local time."""
    slot_id: int
    provider_id: int
    provider_name: str
    date: str = Field(..., description="Local date (YYYY-MM-DD)")
    time: str = Field(..., description="Local start time (HH:mm)")
    start_time: datetime
    end_time: datetime


class ChatMessage(BaseModel):
    """One role-tagged message of the conversation history."""
    role: Role
    content: str
    slots: list[OfferedSlot] | None = Field(None, description="Slots offered with an assistant message")


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., min_length=1)

    @field_validator("messages")
    @classmethod
    def validate_last_message(cls, value: list[ChatMessage]) -> list[ChatMessage]:
        if value[-1].role != "user":
            raise ValueError("The last message must come from the user.")
        return value


class BookingDetails(BaseModel):
    """Booking details extracted from chat, pending explicit user confirmation."""
    name: str
    email: str
    date: str | None = None
    time: str | None = None
    slot_id: int | None = None
    requires_confirmation: bool = True


class ChatReply(BaseModel):
    intent: Literal["availability", "booking", "general"]
    message: str
    slots: list[OfferedSlot] | None = None
    booking_details: BookingDetails | None = None


# ==================== LLM OUTPUT SCHEMAS ====================


def _check_date(value: str | None) -> str | None:
    if value is None:
        return None
    parse_date(value)
    return value.strip()


def _check_time(value: str | None) -> str | None:
    if value is None:
        return None
    parse_time(value)
    return value.strip()


class DateTimeRange(BaseModel):
    """Nullable date and time-of-day bounds extracted by the model."""
    start_date: str | None = Field(None, description="First day, YYYY-MM-DD")
    end_date: str | None = Field(None, description="Last day, YYYY-MM-DD")
    start_time: str | None = Field(None, description="Earliest start time, 24-hour HH:mm")
    end_time: str | None = Field(None, description="Latest start time, 24-hour HH:mm")

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_date(cls, value: str | None) -> str | None:
        return _check_date(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return _check_time(value)

    @property
    def has_filters(self) -> bool:
        return any((self.start_date, self.end_date, self.start_time, self.end_time))

    def to_query(self, provider_id: int | None = None) -> SlotQuery:
        return SlotQuery(
            provider_id=provider_id,
            start_date=self.start_date,
            end_date=self.end_date,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class AvailabilityIntent(DateTimeRange):
    is_availability_request: bool


class CuratedSlot(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="24-hour HH:mm")
    provider_id: int

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return _check_date(value)

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _check_time(value)


class SlotCuration(BaseModel):
    message: str
    slots: list[CuratedSlot]


class AlternativeSuggestion(DateTimeRange):
    message: str
    has_alternative: bool


class BookingIntent(BaseModel):
    message: str
    is_booking_request: bool
    name: str | None = None
    email: str | None = None
    date: str | None = Field(None, description="Chosen slot date, YYYY-MM-DD")
    time: str | None = Field(None, description="Chosen slot start, 24-hour HH:mm")

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str | None) -> str | None:
        return _check_date(value)

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return _check_time(value)


CustomerAction = Literal[
    "ask_availability",
    "respond_to_slots",
    "provide_details",
    "confirm_booking",
    "end_conversation",
]


class CustomerTurn(BaseModel):
    """Next message of the simulated customer."""
    message: str
    is_conversation_complete: bool
    next_action: CustomerAction


# ==================== SIMULATION ====================


class CustomerTurnRequest(BaseModel):
    messages: list[ChatMessage] = Field(default_factory=list)


class SimulationRunRequest(BaseModel):
    max_turns: int | None = Field(None, ge=1, le=50)


class SimulationResult(BaseModel):
    transcript: list[ChatMessage]
    turns: int
    completed: bool
    stopped: bool
    appointment_id: int | None = None
