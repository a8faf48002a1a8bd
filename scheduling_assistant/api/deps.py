"""Shared FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scheduling_assistant.agent.llm import LLMClient, get_llm_client
from scheduling_assistant.database import get_db
from scheduling_assistant.services.notification_service import NotificationService


def get_llm() -> LLMClient:
    return get_llm_client()


def get_notifier() -> NotificationService:
    return NotificationService()


DBSession = Annotated[AsyncSession, Depends(get_db)]
LLM = Annotated[LLMClient, Depends(get_llm)]
Notifier = Annotated[NotificationService, Depends(get_notifier)]
