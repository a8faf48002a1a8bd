import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from scheduling_assistant.exceptions import SlotConflictError, SlotNotFoundError
from scheduling_assistant.models import Appointment, Slot
from scheduling_assistant.schemas.appointment import BookingRequest
from scheduling_assistant.schemas.slot import SlotQuery
from scheduling_assistant.services.availability_service import AvailabilityService
from scheduling_assistant.services.booking_service import BookingService

from tests.conftest import NOW
from tests.fakes import FakeNotifier


async def count_appointments(db) -> int:
    return await db.scalar(select(func.count()).select_from(Appointment))


def jane(**overrides) -> BookingRequest:
    data = {"client_name": "Jane Doe", "client_email": "jane@example.com"}
    data.update(overrides)
    return BookingRequest(**data)


class TestBookSlot:
    async def test_booking_creates_appointment_and_consumes_slot(self, db, make_slot):
        slot = await make_slot("2024-03-21 09:00")

        result = await BookingService(db).book_slot(jane(slot_id=slot.id))

        appointment = result.appointment
        assert appointment.id is not None
        assert appointment.provider_id == slot.provider_id
        assert appointment.start_time == slot.start_time
        assert appointment.end_time == slot.end_time
        assert appointment.client_name == "Jane Doe"
        assert appointment.status == "scheduled"
        assert result.slot.is_available is False
        assert result.slot.appointment_id == appointment.id

        remaining = await AvailabilityService(db).get_available_slots(
            SlotQuery(start_date="2024-03-21", end_date="2024-03-21"), now=NOW
        )
        assert remaining == []

    async def test_appointment_end_matches_a_two_hour_slot(self, db, make_slot):
        slot = await make_slot("2025-01-14 13:00", hours=2)

        result = await BookingService(db).book_slot(jane(slot_id=slot.id))

        assert result.appointment.end_time - result.appointment.start_time == slot.end_time - slot.start_time

    async def test_booking_a_consumed_slot_is_a_conflict(self, db, make_slot):
        slot = await make_slot("2024-03-21 09:00")
        service = BookingService(db)
        await service.book_slot(jane(slot_id=slot.id))

        with pytest.raises(SlotConflictError):
            await service.book_slot(jane(slot_id=slot.id, client_email="other@example.com"))

        assert await count_appointments(db) == 1

    async def test_unknown_slot_is_not_found(self, db):
        with pytest.raises(SlotNotFoundError):
            await BookingService(db).book_slot(jane(slot_id=999))

        assert await count_appointments(db) == 0

    async def test_book_by_local_start_time(self, db, make_slot):
        await make_slot("2025-01-14 09:00")
        slot = await make_slot("2025-01-14 14:00")

        result = await BookingService(db).book_slot(jane(start_time="2025-01-14 14:00"))

        assert result.slot.id == slot.id

    async def test_start_time_matching_only_a_taken_slot_is_a_conflict(self, db, make_slot):
        slot = await make_slot("2025-01-14 14:00", is_available=False)

        with pytest.raises(SlotConflictError):
            await BookingService(db).book_slot(jane(start_time="2025-01-14 14:00"))

        await db.refresh(slot)
        assert slot.appointment_id is None

    async def test_start_time_matching_nothing_is_not_found(self, db, make_slot):
        await make_slot("2025-01-14 14:00")

        with pytest.raises(SlotNotFoundError):
            await BookingService(db).book_slot(jane(start_time="2025-01-14 15:00"))

    async def test_start_time_for_other_provider_is_not_found(self, db, make_slot):
        slot = await make_slot("2025-01-14 14:00")

        with pytest.raises(SlotNotFoundError):
            await BookingService(db).book_slot(jane(start_time="2025-01-14 14:00", provider_id=slot.provider_id + 1))


class TestConcurrentBooking:
    async def test_only_one_of_two_racing_bookings_wins(self, session_factory, make_slot):
        slot = await make_slot("2025-01-14 10:00")

        async with session_factory() as first, session_factory() as second:
            first_service = BookingService(first)
            second_service = BookingService(second)

            # Both sessions observe the slot as open before either writes
            assert (await first.get(Slot, slot.id)).is_open
            assert (await second.get(Slot, slot.id)).is_open

            winner = await first_service.book_slot(jane(slot_id=slot.id))
            with pytest.raises(SlotConflictError):
                await second_service.book_slot(jane(slot_id=slot.id, client_name="John Roe"))

        async with session_factory() as check:
            stored = await check.get(Slot, slot.id)
            assert stored.appointment_id == winner.appointment.id
            assert stored.is_available is False
            assert await count_appointments(check) == 1

    async def test_losing_booking_leaves_no_partial_state(self, session_factory, make_slot):
        slot = await make_slot("2025-01-14 11:00")

        async with session_factory() as stale, session_factory() as other:
            await stale.get(Slot, slot.id)
            await BookingService(other).book_slot(jane(slot_id=slot.id))
            winning_link = (await other.get(Slot, slot.id)).appointment_id

            with pytest.raises(SlotConflictError):
                await BookingService(stale).book_slot(jane(slot_id=slot.id, client_name="Late Comer"))

        async with session_factory() as check:
            stored = await check.get(Slot, slot.id)
            assert stored.appointment_id == winning_link
            names = (await check.execute(select(Appointment.client_name))).scalars().all()
            assert names == ["Jane Doe"]


class TestNotification:
    async def test_sent_confirmation(self, db, make_slot, provider):
        slot = await make_slot("2025-01-14 09:00")
        notifier = FakeNotifier()

        result = await BookingService(db, notifier).book_slot(jane(slot_id=slot.id))

        assert result.notification_status == "sent"
        assert result.degraded is False
        email, provider_name, local_start = notifier.sent[0]
        assert email == "jane@example.com"
        assert provider_name == provider.name
        assert local_start.hour == 9

    async def test_failed_email_keeps_the_booking(self, db, make_slot):
        slot = await make_slot("2025-01-14 09:00")

        result = await BookingService(db, FakeNotifier(fail=True)).book_slot(jane(slot_id=slot.id))

        assert result.notification_status == "failed"
        assert result.degraded is True
        assert "could not be sent" in result.message
        await db.refresh(slot)
        assert slot.appointment_id == result.appointment.id

    async def test_no_notifier_is_skipped(self, db, make_slot):
        slot = await make_slot("2025-01-14 09:00")

        result = await BookingService(db).book_slot(jane(slot_id=slot.id))

        assert result.notification_status == "skipped"
        assert result.degraded is False


class TestBookingRequest:
    def test_normalizes_name_and_email(self):
        request = BookingRequest(slot_id=1, client_name="  Jane   Doe ", client_email=" JANE@Example.COM ")

        assert request.client_name == "Jane Doe"
        assert request.client_email == "jane@example.com"

    @pytest.mark.parametrize(
        "email",
        ["", "jane", "jane@example", "jane doe@example.com", "jane@example..com", "jane@example.com.", "jane@-bad-.com"],
    )
    def test_rejects_malformed_email(self, email):
        with pytest.raises(ValidationError):
            BookingRequest(slot_id=1, client_name="Jane Doe", client_email=email)

    def test_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            BookingRequest(slot_id=1, client_name="   ", client_email="jane@example.com")

    def test_requires_exactly_one_slot_reference(self):
        with pytest.raises(ValidationError):
            BookingRequest(client_name="Jane Doe", client_email="jane@example.com")
        with pytest.raises(ValidationError):
            BookingRequest(
                slot_id=1,
                start_time="2025-01-14 09:00",
                client_name="Jane Doe",
                client_email="jane@example.com",
            )

    def test_rejects_malformed_start_time(self):
        with pytest.raises(ValidationError):
            BookingRequest(start_time="2025-01-14T09:00", client_name="Jane Doe", client_email="jane@example.com")
