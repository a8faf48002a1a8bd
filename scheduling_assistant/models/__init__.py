from scheduling_assistant.models.provider import Provider
from scheduling_assistant.models.slot import Slot
from scheduling_assistant.models.appointment import Appointment, AppointmentStatus

__all__ = ["Provider", "Slot", "Appointment", "AppointmentStatus"]
