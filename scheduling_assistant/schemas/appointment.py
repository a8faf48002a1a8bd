from typing import Literal

from pydantic import BaseModel, EmailStr, Field, TypeAdapter, field_validator, model_validator
from datetime import datetime

from scheduling_assistant.timeutils import parse_local_datetime

EMAIL_ADAPTER = TypeAdapter(EmailStr)


def normalize_client_name(value: str) -> str:
    normalized = " ".join(value.split())
    if not normalized:
        raise ValueError("Client name is required.")
    return normalized


def prepare_client_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def normalize_client_email(value: str) -> str:
    """Trim, lower-case and validate an email address extracted outside a request body."""
    return EMAIL_ADAPTER.validate_python(prepare_client_email(value))


class BookingRequest(BaseModel):
    """Schema for booking a slot.

    The slot is identified either directly by ``slot_id`` or by its exact
    local start time (``YYYY-MM-DD HH:mm``), never both.
    """
    slot_id: int | None = Field(None, description="Slot ID")
    start_time: str | None = Field(None, description="Exact local start (YYYY-MM-DD HH:mm)")
    provider_id: int | None = Field(None, description="Provider used to disambiguate start_time")
    client_name: str = Field(..., max_length=200, description="Client name")
    client_email: EmailStr = Field(..., description="Client email")

    @field_validator("client_name")
    @classmethod
    def validate_client_name(cls, value: str) -> str:
        return normalize_client_name(value)

    @field_validator("client_email", mode="before")
    @classmethod
    def validate_client_email(cls, value):
        return prepare_client_email(value)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        parse_local_datetime(value)
        return " ".join(value.split())

    @model_validator(mode="after")
    def validate_slot_reference(self) -> "BookingRequest":
        if (self.slot_id is None) == (self.start_time is None):
            raise ValueError("Provide exactly one of slot_id or start_time.")
        return self


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""
    id: int
    provider_id: int
    client_name: str
    client_email: str
    start_time: datetime
    end_time: datetime
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


NotificationStatus = Literal["sent", "skipped", "failed"]


class BookingResponse(BaseModel):
    """Schema for a completed booking.

    ``degraded`` is set when the booking committed but the confirmation
    email could not be delivered.
    """
    appointment: AppointmentResponse
    slot_id: int
    notification_status: NotificationStatus
    degraded: bool = False
    message: str
