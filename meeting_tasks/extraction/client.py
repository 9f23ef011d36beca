"""Chat-completion call used by the extraction pipeline."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
from openai import APITimeoutError, OpenAI, OpenAIError

from meeting_tasks.errors import EmptyResponseError, ModelTimeoutError, RemoteInvocationError

if TYPE_CHECKING:
    from meeting_tasks.config import Settings
    from meeting_tasks.extraction.prompts import PromptMessages

logger = logging.getLogger(__name__)

RESPONSE_FORMAT: dict[str, str] = {"type": "json_object"}


@dataclass(frozen=True)
class ModelConfig:
    """Parameters for one chat-completion request.

    ``timeout_seconds`` is an httpx timeout: it bounds each phase of the request
    (connect, write, each read, pool acquisition) separately rather than the
    total wall-clock time. A response that keeps trickling in can run longer.
    """

    model: str = "gpt-3.5-turbo"
    temperature: float = 0.1
    max_tokens: int = 1000
    timeout_seconds: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> ModelConfig:
        return cls(
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
        )

    @property
    def http_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout_seconds)


def create_client(api_key: str, config: ModelConfig) -> OpenAI:
    """Build an OpenAI client whose requests use the config's per-phase timeout.

    SDK-level retries are disabled; attempts are bounded by RetryPolicy.
    """
    return OpenAI(api_key=api_key or None, timeout=config.http_timeout, max_retries=0)


def invoke_model(messages: PromptMessages, config: ModelConfig, client: Any) -> str:
    """Issue one chat-completion request and return the first choice's content.

    Args:
        messages: System and user messages.
        config: Model, sampling and budget parameters.
        client: An ``openai.OpenAI`` instance (or a compatible mock).

    Returns:
        The raw text content of the first completion choice.

    Raises:
        ModelTimeoutError: The request did not finish within the timeout.
        RemoteInvocationError: Any other provider, network or auth failure.
        EmptyResponseError: The response carried no content.
    """
    started = time.perf_counter()
    try:
        response = client.chat.completions.create(
            model=config.model,
            messages=messages.as_chat(),
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            response_format=RESPONSE_FORMAT,
            timeout=config.http_timeout,
        )
    except APITimeoutError as exc:
        raise ModelTimeoutError(
            f"OpenAI API timeout after {config.timeout_seconds:.0f}s"
        ) from exc
    except OpenAIError as exc:
        raise RemoteInvocationError(f"OpenAI API error: {exc}") from exc

    logger.info("OpenAI API call took %.2fs", time.perf_counter() - started)

    usage = getattr(response, "usage", None)
    total_tokens = getattr(usage, "total_tokens", None)
    if total_tokens:
        logger.info("Tokens used: %s", total_tokens)
    else:
        logger.warning("No token usage information available")

    choices = response.choices or []
    content = choices[0].message.content if choices else None
    if not content:
        raise EmptyResponseError("No response from AI")

    logger.debug("Raw AI response: %s", content)
    return str(content)
