"""Appointment routes - API endpoints for booking operations."""

from fastapi import APIRouter

from scheduling_assistant.api.deps import DBSession, Notifier
from scheduling_assistant.exceptions import NotFoundError
from scheduling_assistant.schemas.appointment import AppointmentResponse, BookingRequest, BookingResponse
from scheduling_assistant.services.booking_service import BookingService

router = APIRouter()


@router.post("", response_model=BookingResponse, status_code=201)
async def book_appointment(booking_data: BookingRequest, db: DBSession, notifier: Notifier):
    """Book an open slot.

    Returns 404 for an unknown slot and 409 when it was already taken. A
    booking whose confirmation email failed still returns 201 with
    ``degraded`` set.
    """
    service = BookingService(db, notifier)
    result = await service.book_slot(booking_data)
    return BookingResponse(
        appointment=AppointmentResponse.model_validate(result.appointment),
        slot_id=result.slot.id,
        notification_status=result.notification_status,
        degraded=result.degraded,
        message=result.message,
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(appointment_id: int, db: DBSession):
    """Get an appointment by ID."""
    service = BookingService(db)
    appointment = await service.get_appointment(appointment_id)

    if not appointment:
        raise NotFoundError("Appointment not found", details={"appointment_id": appointment_id})

    return appointment
