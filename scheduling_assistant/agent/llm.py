"""LLM client capability and the schema-validated retry loop."""

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Callable, TypeVar, overload

import logfire
import openai
from pydantic import BaseModel

from scheduling_assistant.config import settings
from scheduling_assistant.exceptions import LLMOutputError, UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")

Message = dict[str, str]


class LLMClient(ABC):
    """
    Abstract Base Class for LLM providers.
    Any client used by the intent layer returns the raw JSON text the model
    produced for the requested schema; parsing happens in generate_structured.
    """

    @abstractmethod
    async def generate(self, messages: list[Message], response_model: type[BaseModel]) -> str:
        """Run one completion constrained to ``response_model`` and return its raw text."""


class OpenAIClient(LLMClient):
    """Chat completions with a JSON schema response format."""

    def __init__(self, api_key: str, model: str, temperature: float):
        self.model = model
        self.temperature = temperature
        self.client = openai.AsyncOpenAI(api_key=api_key)

    async def generate(self, messages: list[Message], response_model: type[BaseModel]) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": response_model.__name__,
                        "schema": response_model.model_json_schema(),
                        "strict": False,
                    },
                },
            )
        except openai.OpenAIError as exc:
            logfire.error("llm_request_error", schema=response_model.__name__, error=str(exc))
            raise UpstreamError(f"LLM request failed: {exc}") from exc

        return response.choices[0].message.content or ""


@lru_cache
def get_llm_client() -> LLMClient:
    """Process-wide LLM client, created on first use."""
    if not settings.openai_api_key:
        raise UpstreamError("OpenAI API key is not configured")
    return OpenAIClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        temperature=settings.llm_temperature,
    )


def correction_notice(error: str) -> str:
    return (
        "Your previous response did not match the required JSON format.\n"
        f"Errors:\n{error}\n"
        "Reply again with only the corrected JSON object."
    )


@overload
async def generate_structured(
    llm: LLMClient,
    messages: list[Message],
    response_model: type[T],
    *,
    operation: str,
    max_attempts: int | None = ...,
    validate: None = ...,
) -> T: ...


@overload
async def generate_structured(
    llm: LLMClient,
    messages: list[Message],
    response_model: type[T],
    *,
    operation: str,
    max_attempts: int | None = ...,
    validate: Callable[[T], R],
) -> R: ...


async def generate_structured(
    llm: LLMClient,
    messages: list[Message],
    response_model: type[T],
    *,
    operation: str,
    max_attempts: int | None = None,
    validate: Callable[[T], Any] | None = None,
) -> Any:
    """Ask for ``response_model`` output, re-prompting on invalid responses.

    Each rejected response is appended to the conversation together with a
    correction notice naming the errors. ``validate`` runs after schema
    parsing; it raises ``ValueError`` to reject a response and otherwise
    returns the value handed back to the caller.

    Raises:
        LLMOutputError: when every attempt fails validation.
    """
    attempts = max_attempts or settings.llm_max_attempts
    conversation = list(messages)
    last_error = ""

    for attempt in range(1, attempts + 1):
        raw = await llm.generate(conversation, response_model)
        try:
            parsed = response_model.model_validate_json(raw)
            result = validate(parsed) if validate is not None else parsed
        except ValueError as exc:
            last_error = str(exc)
            logfire.warn(
                "llm_output_invalid",
                operation=operation,
                attempt=attempt,
                error=last_error,
            )
            conversation.append({"role": "assistant", "content": raw})
            conversation.append({"role": "user", "content": correction_notice(last_error)})
            continue

        logfire.info("llm_output_valid", operation=operation, attempt=attempt)
        return result

    logger.error("LLM output for %s failed after %d attempts: %s", operation, attempts, last_error)
    raise LLMOutputError(operation, attempts, last_error)
