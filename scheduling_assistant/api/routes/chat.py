"""Chat routes - conversational endpoint backed by the intent layer."""

from fastapi import APIRouter

from scheduling_assistant.agent.conversation import ConversationService
from scheduling_assistant.agent.intent import IntentLayer
from scheduling_assistant.api.deps import LLM, DBSession
from scheduling_assistant.schemas.chat import ChatReply, ChatRequest

router = APIRouter()


@router.post("", response_model=ChatReply)
async def chat(request: ChatRequest, db: DBSession, llm: LLM):
    """Reply to the latest user message.

    Booking details in the reply are pending: the client books them through
    ``POST /api/appointments`` once the user confirms.
    """
    service = ConversationService(db, IntentLayer(llm))
    return await service.respond(request.messages)
