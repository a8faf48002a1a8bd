from scheduling_assistant.schemas.provider import ProviderResponse
from scheduling_assistant.schemas.slot import (
    SlotQuery,
    SlotResponse,
    ScheduleDay,
    ScheduleEntry,
    WeekSchedule,
)
from scheduling_assistant.schemas.appointment import (
    BookingRequest,
    AppointmentResponse,
    BookingResponse,
)
from scheduling_assistant.schemas.chat import (
    ChatMessage,
    ChatRequest,
    ChatReply,
    OfferedSlot,
    BookingDetails,
    CustomerTurn,
    SimulationResult,
)

__all__ = [
    "ProviderResponse",
    "SlotQuery",
    "SlotResponse",
    "ScheduleDay",
    "ScheduleEntry",
    "WeekSchedule",
    "BookingRequest",
    "AppointmentResponse",
    "BookingResponse",
    "ChatMessage",
    "ChatRequest",
    "ChatReply",
    "OfferedSlot",
    "BookingDetails",
    "CustomerTurn",
    "SimulationResult",
]
