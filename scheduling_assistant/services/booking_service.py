"""Booking service - Converts one open slot into a confirmed appointment."""

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scheduling_assistant.exceptions import SlotConflictError, SlotNotFoundError
from scheduling_assistant.models.appointment import Appointment, AppointmentStatus
from scheduling_assistant.models.slot import Slot
from scheduling_assistant.schemas.appointment import BookingRequest, NotificationStatus
from scheduling_assistant.services.availability_service import AvailabilityService, slot_local_start
from scheduling_assistant.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass
class BookingResult:
    appointment: Appointment
    slot: Slot
    notification_status: NotificationStatus

    @property
    def degraded(self) -> bool:
        return self.notification_status == "failed"

    @property
    def message(self) -> str:
        if self.degraded:
            return "Appointment booked, but the confirmation email could not be sent."
        if self.notification_status == "sent":
            return "Appointment booked and confirmation email sent."
        return "Appointment booked."


class BookingService:
    """Service class for the booking transaction."""

    def __init__(self, db: AsyncSession, notifier: NotificationService | None = None):
        self.db = db
        self.notifier = notifier

    async def _resolve_slot(self, request: BookingRequest) -> Slot:
        if request.slot_id is not None:
            result = await self.db.execute(
                select(Slot).options(selectinload(Slot.provider)).where(Slot.id == request.slot_id)
            )
            slot = result.scalar_one_or_none()
            if slot is None:
                raise SlotNotFoundError(
                    f"Slot {request.slot_id} not found.", details={"slot_id": request.slot_id}
                )
            return slot

        availability = AvailabilityService(self.db)
        slot = await availability.find_slot_by_start(request.start_time, request.provider_id)
        if slot is None:
            # Distinguish a consumed slot from one that never existed
            slot = await availability.find_slot_by_start(
                request.start_time, request.provider_id, open_only=False
            )
        if slot is None:
            raise SlotNotFoundError(
                f"No slot starts at {request.start_time}.", details={"start_time": request.start_time}
            )
        return slot

    async def book_slot(self, request: BookingRequest) -> BookingResult:
        """Book a slot for a client.

        The appointment insert and the slot update share one transaction. The
        slot UPDATE re-checks openness in its WHERE clause, so of two racing
        requests the database lets exactly one through; the other sees zero
        affected rows and is rolled back as a conflict.
        """
        slot = await self._resolve_slot(request)
        if not slot.is_open:
            raise SlotConflictError(
                f"Slot {slot.id} is no longer available.", details={"slot_id": slot.id}
            )

        try:
            appointment = Appointment(
                provider_id=slot.provider_id,
                client_name=request.client_name,
                client_email=request.client_email,
                start_time=slot.start_time,
                end_time=slot.end_time,
                status=AppointmentStatus.SCHEDULED.value,
            )
            self.db.add(appointment)
            await self.db.flush()

            result = await self.db.execute(
                update(Slot)
                .where(
                    Slot.id == slot.id,
                    Slot.is_available.is_(True),
                    Slot.appointment_id.is_(None),
                )
                .values(is_available=False, appointment_id=appointment.id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await self.db.rollback()
                logger.info("Slot %s was taken by a concurrent booking", slot.id)
                raise SlotConflictError(
                    f"Slot {slot.id} is no longer available.", details={"slot_id": slot.id}
                )

            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Booking transaction failed for slot %s", slot.id)
            raise

        await self.db.refresh(slot, attribute_names=["is_available", "appointment_id"])
        logger.info("Booked slot %s as appointment %s", slot.id, appointment.id)

        notification_status = await self._notify(appointment, slot)
        return BookingResult(appointment=appointment, slot=slot, notification_status=notification_status)

    async def _notify(self, appointment: Appointment, slot: Slot) -> NotificationStatus:
        """Best-effort confirmation; a failure never undoes the booking."""
        if self.notifier is None:
            return "skipped"
        try:
            sent = await self.notifier.send_booking_confirmation(
                appointment, slot.provider.name, slot_local_start(slot)
            )
        except Exception:
            logger.exception("Confirmation email failed for appointment %s", appointment.id)
            return "failed"
        return "sent" if sent else "skipped"

    async def get_appointment(self, appointment_id: int) -> Appointment | None:
        """Get an appointment by ID."""
        return await self.db.get(Appointment, appointment_id)
