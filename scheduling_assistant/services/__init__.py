"""Services package - Business logic layer."""

from scheduling_assistant.services.provider_service import ProviderService
from scheduling_assistant.services.availability_service import AvailabilityService
from scheduling_assistant.services.booking_service import BookingResult, BookingService
from scheduling_assistant.services.notification_service import NotificationService

__all__ = [
    "ProviderService",
    "AvailabilityService",
    "BookingResult",
    "BookingService",
    "NotificationService",
]
