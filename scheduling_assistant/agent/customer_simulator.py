"""Simulated customer - drives the assistant end to end for testing."""

import asyncio
import logging

import logfire
from sqlalchemy.ext.asyncio import AsyncSession

from scheduling_assistant.agent.conversation import ConversationService
from scheduling_assistant.agent.intent import IntentLayer, render_message
from scheduling_assistant.agent.llm import LLMClient, Message, generate_structured
from scheduling_assistant.agent.prompts import get_customer_prompt
from scheduling_assistant.config import settings
from scheduling_assistant.exceptions import SlotConflictError
from scheduling_assistant.schemas.appointment import BookingRequest
from scheduling_assistant.schemas.chat import BookingDetails, ChatMessage, CustomerTurn, SimulationResult
from scheduling_assistant.services.booking_service import BookingService
from scheduling_assistant.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

FLIPPED_ROLES = {"user": "assistant", "assistant": "user"}

OPENING_CUE = "Start the conversation by asking for an appointment."


def flip_transcript(transcript: list[ChatMessage]) -> list[Message]:
    """The transcript as the customer sees it: its own lines are the assistant's."""
    return [
        {"role": FLIPPED_ROLES[message.role], "content": render_message(message)}
        for message in transcript
        if message.role in FLIPPED_ROLES
    ]


class CustomerSimulator:
    """LLM-played customer that books through the same paths a real user would."""

    def __init__(
        self,
        db: AsyncSession,
        llm: LLMClient,
        notifier: NotificationService | None = None,
        max_turns: int | None = None,
        customer_name: str | None = None,
        customer_email: str | None = None,
    ):
        self.llm = llm
        self.conversation = ConversationService(db, IntentLayer(llm))
        self.booking = BookingService(db, notifier)
        self.max_turns = max_turns or settings.simulation_max_turns
        self.customer_name = customer_name or settings.simulated_customer_name
        self.customer_email = customer_email or settings.simulated_customer_email
        self._stop = asyncio.Event()

    def stop(self) -> None:
        """Ask a running loop to finish after the current turn."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    async def next_turn(self, transcript: list[ChatMessage]) -> CustomerTurn:
        """Generate the customer's next message for ``transcript``."""
        messages = [
            {"role": "system", "content": get_customer_prompt(self.customer_name, self.customer_email)},
            *flip_transcript(transcript),
        ]
        if len(messages) == 1:
            messages.append({"role": "user", "content": OPENING_CUE})
        return await generate_structured(self.llm, messages, CustomerTurn, operation="customer_turn")

    async def run(self, max_turns: int | None = None) -> SimulationResult:
        """Alternate customer and assistant turns until done, stopped or out of turns."""
        limit = max_turns or self.max_turns
        transcript: list[ChatMessage] = []
        appointment_id = None
        completed = False
        turns = 0

        while turns < limit and not self._stop.is_set():
            turn = await self.next_turn(transcript)
            turns += 1
            transcript.append(ChatMessage(role="user", content=turn.message))
            logfire.info("simulated_customer_turn", turn=turns, next_action=turn.next_action)

            if turn.is_conversation_complete or turn.next_action == "end_conversation":
                completed = True
                break

            reply = await self.conversation.respond(transcript)
            transcript.append(ChatMessage(role="assistant", content=reply.message, slots=reply.slots or None))

            details = reply.booking_details
            if details is not None and details.slot_id is not None and appointment_id is None:
                confirmation, appointment_id = await self._confirm(details)
                transcript.append(ChatMessage(role="assistant", content=confirmation))

        if self._stop.is_set():
            logger.info("Simulation stopped after %d turns", turns)

        return SimulationResult(
            transcript=transcript,
            turns=turns,
            completed=completed,
            stopped=self._stop.is_set(),
            appointment_id=appointment_id,
        )

    async def _confirm(self, details: BookingDetails) -> tuple[str, int | None]:
        """Press "Confirm" on pending booking details."""
        request = BookingRequest(
            slot_id=details.slot_id,
            client_name=details.name,
            client_email=details.email,
        )
        try:
            result = await self.booking.book_slot(request)
        except SlotConflictError as exc:
            logger.info("Simulated booking lost the slot: %s", exc.message)
            return "Sorry, that slot was just taken. Would you like to pick another time?", None

        when = f"{details.date} at {details.time}" if details.date and details.time else "the chosen time"
        return f"Your appointment on {when} is confirmed. {result.message}", result.appointment.id
