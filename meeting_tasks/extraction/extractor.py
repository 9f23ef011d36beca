"""Text-to-task extraction: prompt -> model -> normalize -> resolve, with retries."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from meeting_tasks.config import Settings, settings as default_settings
from meeting_tasks.extraction.client import ModelConfig, create_client, invoke_model
from meeting_tasks.extraction.dates import compute_date_context
from meeting_tasks.extraction.models import ParsedTask
from meeting_tasks.extraction.normalizer import parse_response
from meeting_tasks.extraction.prompts import PROMPT_VERSION, PromptMessages, build_messages
from meeting_tasks.extraction.resolver import resolve_tasks
from meeting_tasks.extraction.retry import RetryPolicy, run_with_retries

logger = logging.getLogger(__name__)


def extract_once(messages: PromptMessages, config: ModelConfig, client: Any) -> list[ParsedTask]:
    """Run a single attempt: one model call, then normalization and resolution."""
    raw = invoke_model(messages, config, client)
    candidates = parse_response(raw)
    return resolve_tasks(candidates)


def extract_tasks(
    text: str,
    *,
    settings: Settings | None = None,
    client: Any = None,
    policy: RetryPolicy | None = None,
    now: datetime | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[ParsedTask]:
    """Extract structured tasks from meeting minutes.

    This is the main entry point used by the API and the CLI.

    Args:
        text: Raw meeting minutes or transcript text.
        settings: Configuration; defaults to the process-wide settings.
        client: OpenAI client; built from *settings* when omitted.
        policy: Retry policy; built from *settings* when omitted.
        now: Current instant for the date anchors; defaults to the wall clock.
        sleep: Backoff sleep, injectable for tests.

    Returns:
        The resolved tasks, in the order the model listed them.

    Raises:
        ValueError: *text* is blank.
        ExtractionFailedError: Every attempt failed.
    """
    if not text or not text.strip():
        raise ValueError("Text is required to extract tasks")

    cfg = settings or default_settings
    config = ModelConfig.from_settings(cfg)
    if client is None:
        client = create_client(cfg.openai_api_key, config)
    if policy is None:
        policy = RetryPolicy.from_settings(cfg)

    date_context = compute_date_context(now)
    messages = build_messages(text, date_context, cfg.max_input_chars)
    logger.info(
        "Extracting tasks from %d chars (model=%s, prompt v%s)",
        len(text),
        config.model,
        PROMPT_VERSION,
    )

    tasks = run_with_retries(lambda: extract_once(messages, config, client), policy, sleep)
    logger.info("Successfully parsed %d tasks", len(tasks))
    return tasks
