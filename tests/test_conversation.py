import pytest

from scheduling_assistant.agent.conversation import ConversationService
from scheduling_assistant.agent.intent import IntentLayer
from scheduling_assistant.schemas.chat import ChatMessage

from tests.conftest import NOW
from tests.fakes import FakeLLM

NOT_AVAILABILITY = {"is_availability_request": False}


def user_says(content: str) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content="You are a helpful assistant."),
        ChatMessage(role="assistant", content="Hi! Would you like to book an appointment?"),
        ChatMessage(role="user", content=content),
    ]


def conversation(db, llm: FakeLLM) -> ConversationService:
    return ConversationService(db, IntentLayer(llm))


class TestAvailabilityTurn:
    async def test_classify_then_query_then_curate(self, db, make_slot):
        slot = await make_slot("2025-01-21 14:00")
        llm = FakeLLM({
            "AvailabilityIntent": [{
                "is_availability_request": True,
                "start_date": "2025-01-20",
                "end_date": "2025-01-26",
                "start_time": "12:00",
                "end_time": "17:00",
            }],
            "SlotCuration": [{
                "message": "Tuesday at 2 PM is open.",
                "slots": [{"date": "2025-01-21", "time": "14:00", "provider_id": slot.provider_id}],
            }],
        })

        reply = await conversation(db, llm).respond(user_says("Anything next week in the afternoon?"), now=NOW)

        assert reply.intent == "availability"
        assert reply.message == "Tuesday at 2 PM is open."
        assert [(s.slot_id, s.date, s.time, s.provider_name) for s in reply.slots] == [
            (slot.id, "2025-01-21", "14:00", "Dr. Rivera")
        ]
        assert [name for name, _ in llm.calls] == ["AvailabilityIntent", "SlotCuration"]

    async def test_candidates_are_capped_before_curation(self, db, make_slot):
        slots = [await make_slot(f"2025-01-{day} 09:00") for day in (14, 15, 16, 17)]
        llm = FakeLLM({
            "AvailabilityIntent": [{"is_availability_request": True}],
            "SlotCuration": [{
                "message": "Tuesday works.",
                "slots": [{"date": "2025-01-14", "time": "09:00", "provider_id": slots[0].provider_id}],
            }],
        })

        await ConversationService(db, IntentLayer(llm), max_candidates=2).respond(user_says("When are you free?"), now=NOW)

        listing = llm.calls_for("SlotCuration")[0][0]["content"]
        assert "2025-01-15" in listing
        assert "2025-01-16" not in listing

    async def test_empty_result_runs_the_alternative_and_requeries_once(self, db, make_slot):
        slot = await make_slot("2025-01-22 10:00")
        llm = FakeLLM({
            "AvailabilityIntent": [{
                "is_availability_request": True,
                "start_date": "2025-01-21",
                "end_date": "2025-01-21",
            }],
            "AlternativeSuggestion": [{
                "message": "Nothing on Tuesday, but Wednesday has openings.",
                "has_alternative": True,
                "start_date": "2025-01-22",
                "end_date": "2025-01-22",
            }],
            "SlotCuration": [{
                "message": "Wednesday at 10 AM is open.",
                "slots": [{"date": "2025-01-22", "time": "10:00", "provider_id": slot.provider_id}],
            }],
        })

        reply = await conversation(db, llm).respond(user_says("Next Tuesday?"), now=NOW)

        assert [s.slot_id for s in reply.slots] == [slot.id]
        assert [name for name, _ in llm.calls] == ["AvailabilityIntent", "AlternativeSuggestion", "SlotCuration"]
        assert "start_date=2025-01-21" in llm.calls_for("AlternativeSuggestion")[0][0]["content"]

    async def test_empty_alternative_result_never_curates(self, db):
        llm = FakeLLM({
            "AvailabilityIntent": [{"is_availability_request": True, "start_date": "2025-01-21"}],
            "AlternativeSuggestion": [{
                "message": "Nothing that week, maybe the one after?",
                "has_alternative": True,
                "start_date": "2025-01-27",
                "end_date": "2025-02-02",
            }],
        })

        reply = await conversation(db, llm).respond(user_says("Next Tuesday?"), now=NOW)

        assert reply.intent == "availability"
        assert reply.message == "Nothing that week, maybe the one after?"
        assert reply.slots == []
        assert llm.calls_for("SlotCuration") == []
        assert len(llm.calls_for("AlternativeSuggestion")) == 1

    async def test_no_alternative_returns_the_suggestion_message(self, db):
        llm = FakeLLM({
            "AvailabilityIntent": [{"is_availability_request": True}],
            "AlternativeSuggestion": [{"message": "We're fully booked for now.", "has_alternative": False}],
        })

        reply = await conversation(db, llm).respond(user_says("Any time?"), now=NOW)

        assert reply.message == "We're fully booked for now."
        assert reply.slots == []


class TestBookingTurn:
    async def test_details_are_pending_confirmation(self, db, make_slot):
        slot = await make_slot("2025-01-21 14:00")
        llm = FakeLLM({
            "AvailabilityIntent": [NOT_AVAILABILITY],
            "BookingIntent": [{
                "message": "Just to confirm: Tuesday 14:00 for Jane Doe, jane@example.com?",
                "is_booking_request": True,
                "name": " Jane Doe ",
                "email": "Jane@Example.com",
                "date": "2025-01-21",
                "time": "14:00",
            }],
        })

        reply = await conversation(db, llm).respond(user_says("2pm please, Jane Doe, jane@example.com"), now=NOW)

        assert reply.intent == "booking"
        details = reply.booking_details
        assert details.name == "Jane Doe"
        assert details.email == "jane@example.com"
        assert details.slot_id == slot.id
        assert details.requires_confirmation is True
        await db.refresh(slot)
        assert slot.is_open

    async def test_missing_email_yields_no_details(self, db):
        llm = FakeLLM({
            "AvailabilityIntent": [NOT_AVAILABILITY],
            "BookingIntent": [{
                "message": "Could I get your email?",
                "is_booking_request": True,
                "name": "Jane Doe",
                "date": "2025-01-21",
                "time": "14:00",
            }],
        })

        reply = await conversation(db, llm).respond(user_says("2pm, I'm Jane"), now=NOW)

        assert reply.intent == "booking"
        assert reply.booking_details is None

    @pytest.mark.parametrize("email", ["jane at example", "jane@example..com", "jane@-bad-.com"])
    async def test_malformed_email_yields_no_details(self, db, email):
        llm = FakeLLM({
            "AvailabilityIntent": [NOT_AVAILABILITY],
            "BookingIntent": [{
                "message": "Please confirm.",
                "is_booking_request": True,
                "name": "Jane Doe",
                "email": email,
            }],
        })

        reply = await conversation(db, llm).respond(user_says(f"Jane Doe, {email}"), now=NOW)

        assert reply.booking_details is None

    async def test_unmatched_start_leaves_slot_unresolved(self, db, make_slot):
        await make_slot("2025-01-21 14:00")
        llm = FakeLLM({
            "AvailabilityIntent": [NOT_AVAILABILITY],
            "BookingIntent": [{
                "message": "Please confirm.",
                "is_booking_request": True,
                "name": "Jane Doe",
                "email": "jane@example.com",
                "date": "2025-01-21",
                "time": "15:00",
            }],
        })

        reply = await conversation(db, llm).respond(user_says("3pm"), now=NOW)

        assert reply.booking_details.slot_id is None

    async def test_general_turn(self, db):
        llm = FakeLLM({
            "AvailabilityIntent": [NOT_AVAILABILITY],
            "BookingIntent": [{"message": "I can only help with scheduling.", "is_booking_request": False}],
        })

        reply = await conversation(db, llm).respond(user_says("What's the capital of France?"), now=NOW)

        assert reply.intent == "general"
        assert reply.booking_details is None
        assert reply.slots is None

    async def test_client_system_messages_never_reach_the_model(self, db):
        llm = FakeLLM({
            "AvailabilityIntent": [NOT_AVAILABILITY],
            "BookingIntent": [{"message": "Hello!", "is_booking_request": False}],
        })

        await conversation(db, llm).respond(user_says("Hi"), now=NOW)

        for _, messages in llm.calls:
            system_messages = [m for m in messages if m["role"] == "system"]
            assert len(system_messages) == 1
            assert "helpful assistant." not in system_messages[0]["content"]
