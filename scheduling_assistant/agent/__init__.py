"""Agent package - LLM intent layer, conversation pipeline and simulated customer."""

from scheduling_assistant.agent.llm import LLMClient, OpenAIClient, generate_structured, get_llm_client
from scheduling_assistant.agent.intent import IntentLayer
from scheduling_assistant.agent.conversation import ConversationService
from scheduling_assistant.agent.customer_simulator import CustomerSimulator

__all__ = [
    "LLMClient",
    "OpenAIClient",
    "generate_structured",
    "get_llm_client",
    "IntentLayer",
    "ConversationService",
    "CustomerSimulator",
]
