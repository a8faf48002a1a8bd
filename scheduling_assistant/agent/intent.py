"""Conversational intent layer - LLM calls that turn chat into structured operations."""

from dataclasses import dataclass
from datetime import datetime

import logfire

from scheduling_assistant.agent.llm import LLMClient, Message, generate_structured
from scheduling_assistant.agent.prompts import (
    get_alternative_prompt,
    get_availability_prompt,
    get_booking_prompt,
    get_curation_prompt,
)
from scheduling_assistant.config import settings
from scheduling_assistant.models.slot import Slot
from scheduling_assistant.schemas.chat import (
    AlternativeSuggestion,
    AvailabilityIntent,
    BookingIntent,
    ChatMessage,
    OfferedSlot,
    SlotCuration,
)
from scheduling_assistant.schemas.slot import SlotQuery
from scheduling_assistant.services.availability_service import slot_local_start
from scheduling_assistant.timeutils import format_date, format_time


def to_offered_slot(slot: Slot) -> OfferedSlot:
    local_start = slot_local_start(slot)
    return OfferedSlot(
        slot_id=slot.id,
        provider_id=slot.provider_id,
        provider_name=slot.provider.name,
        date=format_date(local_start),
        time=format_time(local_start),
        start_time=slot.start_time,
        end_time=slot.end_time,
    )


def render_slot_line(slot: OfferedSlot) -> str:
    return f"- date {slot.date}, time {slot.time}, provider_id {slot.provider_id} ({slot.provider_name})"


def render_message(message: ChatMessage) -> str:
    """Message text with any offered slots appended, so the model can see them."""
    if not message.slots:
        return message.content
    lines = "\n".join(render_slot_line(slot) for slot in message.slots)
    return f"{message.content}\n\nOffered slots:\n{lines}"


def render_history(history: list[ChatMessage]) -> list[Message]:
    """Conversation history as chat messages; client-sent system messages are dropped."""
    return [
        {"role": message.role, "content": render_message(message)}
        for message in history
        if message.role != "system"
    ]


def describe_query(query: SlotQuery) -> str:
    parts = [f"{name}={value}" for name, value in query.model_dump(exclude_none=True).items()]
    return ", ".join(parts) or "no filters"


@dataclass
class Curation:
    """Curated slots mapped back to their rows, in the model's order."""
    message: str
    slots: list[Slot]


class IntentLayer:
    """One LLM call per sub-operation, each validated against its output schema."""

    def __init__(
        self,
        llm: LLMClient,
        max_attempts: int | None = None,
        max_offered: int | None = None,
    ):
        self.llm = llm
        self.max_attempts = max_attempts or settings.llm_max_attempts
        self.max_offered = max_offered or settings.max_offered_slots

    async def classify_availability(self, history: list[ChatMessage], now: datetime) -> AvailabilityIntent:
        """Decide whether the latest message asks for availability and extract its range."""
        messages = [{"role": "system", "content": get_availability_prompt(now)}, *render_history(history)]
        intent = await generate_structured(
            self.llm,
            messages,
            AvailabilityIntent,
            operation="classify_availability",
            max_attempts=self.max_attempts,
        )
        logfire.info(
            "intent_classified",
            is_availability_request=intent.is_availability_request,
            start_date=intent.start_date,
            end_date=intent.end_date,
            start_time=intent.start_time,
            end_time=intent.end_time,
        )
        return intent

    async def curate_slots(self, history: list[ChatMessage], slots: list[Slot], now: datetime) -> Curation:
        """Let the model pick which candidates to offer.

        Every returned (date, time, provider_id) triple must name one of
        ``slots``, and between 1 and ``max_offered`` must be chosen; anything
        else is treated as malformed output and re-prompted.
        """
        if not slots:
            raise ValueError("curate_slots needs at least one candidate slot")

        candidates = {}
        for slot in slots:
            offered = to_offered_slot(slot)
            candidates[(offered.date, offered.time, offered.provider_id)] = slot
        listing = "\n".join(render_slot_line(to_offered_slot(slot)) for slot in slots)

        def resolve(curation: SlotCuration) -> Curation:
            if not curation.slots:
                raise ValueError("Choose at least one slot from the list.")
            if len(curation.slots) > self.max_offered:
                raise ValueError(f"Choose at most {self.max_offered} slots; got {len(curation.slots)}.")
            chosen: list[Slot] = []
            for item in curation.slots:
                slot = candidates.get((item.date, item.time, item.provider_id))
                if slot is None:
                    raise ValueError(
                        f"Slot date {item.date}, time {item.time}, provider_id {item.provider_id} "
                        "is not in the list of available slots."
                    )
                if slot not in chosen:
                    chosen.append(slot)
            return Curation(message=curation.message, slots=chosen)

        messages = [
            {"role": "system", "content": get_curation_prompt(now, listing, self.max_offered)},
            *render_history(history),
        ]
        curation = await generate_structured(
            self.llm,
            messages,
            SlotCuration,
            operation="curate_slots",
            max_attempts=self.max_attempts,
            validate=resolve,
        )
        logfire.info("slots_curated", candidates=len(slots), offered=[slot.id for slot in curation.slots])
        return curation

    async def suggest_alternative(
        self, history: list[ChatMessage], query: SlotQuery, now: datetime
    ) -> AlternativeSuggestion:
        """Propose relaxed query parameters after an empty availability result."""
        messages = [
            {"role": "system", "content": get_alternative_prompt(now, describe_query(query))},
            *render_history(history),
        ]
        suggestion = await generate_structured(
            self.llm,
            messages,
            AlternativeSuggestion,
            operation="suggest_alternative",
            max_attempts=self.max_attempts,
        )
        logfire.info("alternative_suggested", has_alternative=suggestion.has_alternative)
        return suggestion

    async def detect_booking(self, history: list[ChatMessage], now: datetime) -> BookingIntent:
        """Detect a booking request and extract the client's details."""
        messages = [{"role": "system", "content": get_booking_prompt(now)}, *render_history(history)]
        intent = await generate_structured(
            self.llm,
            messages,
            BookingIntent,
            operation="detect_booking",
            max_attempts=self.max_attempts,
        )
        logfire.info(
            "booking_intent_detected",
            is_booking_request=intent.is_booking_request,
            date=intent.date,
            time=intent.time,
            has_name=bool(intent.name),
            has_email=bool(intent.email),
        )
        return intent
