"""Conversation pipeline - classify, query, curate or suggest, then detect bookings."""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from scheduling_assistant.agent.intent import IntentLayer, to_offered_slot
from scheduling_assistant.config import settings
from scheduling_assistant.database import utcnow
from scheduling_assistant.schemas.appointment import normalize_client_email, normalize_client_name
from scheduling_assistant.schemas.chat import AvailabilityIntent, BookingDetails, BookingIntent, ChatMessage, ChatReply
from scheduling_assistant.services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)


class ConversationService:
    """Service class producing the assistant's reply to a chat transcript."""

    def __init__(self, db: AsyncSession, intent: IntentLayer, max_candidates: int | None = None):
        self.availability = AvailabilityService(db)
        self.intent = intent
        self.max_candidates = max_candidates or settings.max_candidate_slots

    async def respond(self, messages: list[ChatMessage], now: datetime | None = None) -> ChatReply:
        """Reply to the latest user message.

        Availability requests run the slot query and either curate the
        results or, when nothing matched, ask for an alternative and re-run
        the query once with it. Every other turn goes to booking detection.
        """
        now = now or utcnow()
        history = [message for message in messages if message.role != "system"]

        intent = await self.intent.classify_availability(history, now)
        if intent.is_availability_request:
            return await self._availability_reply(history, intent, now)
        return await self._booking_reply(history, now)

    async def _availability_reply(
        self, history: list[ChatMessage], intent: AvailabilityIntent, now: datetime
    ) -> ChatReply:
        query = intent.to_query()
        slots = await self.availability.get_available_slots(query, now=now)

        if not slots:
            suggestion = await self.intent.suggest_alternative(history, query, now)
            if not (suggestion.has_alternative and suggestion.has_filters):
                return ChatReply(intent="availability", message=suggestion.message, slots=[])

            slots = await self.availability.get_available_slots(suggestion.to_query(), now=now)
            if not slots:
                logger.info("Alternative query also came back empty")
                return ChatReply(intent="availability", message=suggestion.message, slots=[])

        curation = await self.intent.curate_slots(history, slots[: self.max_candidates], now)
        return ChatReply(
            intent="availability",
            message=curation.message,
            slots=[to_offered_slot(slot) for slot in curation.slots],
        )

    async def _booking_reply(self, history: list[ChatMessage], now: datetime) -> ChatReply:
        booking = await self.intent.detect_booking(history, now)
        if not booking.is_booking_request:
            return ChatReply(intent="general", message=booking.message)

        return ChatReply(
            intent="booking",
            message=booking.message,
            booking_details=await self._booking_details(booking),
        )

    async def _booking_details(self, booking: BookingIntent) -> BookingDetails | None:
        """Pending details once both name and a well-formed email are known."""
        if not booking.name or not booking.email:
            return None
        try:
            name = normalize_client_name(booking.name)
            email = normalize_client_email(booking.email)
        except ValueError as exc:
            logger.info("Ignoring incomplete booking details: %s", exc)
            return None

        slot_id = None
        if booking.date and booking.time:
            slot = await self.availability.find_open_slot_by_start(f"{booking.date} {booking.time}")
            slot_id = slot.id if slot else None

        return BookingDetails(
            name=name,
            email=email,
            date=booking.date,
            time=booking.time,
            slot_id=slot_id,
        )
