"""Locate task candidates in the model's JSON, whatever envelope it chose.

The prompt asks for ``{"tasks": [...]}`` but the model does not always comply,
so the envelope is classified through a fixed cascade:

1. a bare list
2. a ``tasks`` list
3. a single bare task object (has a ``description``)
4. every list-valued property, flattened in key order
5. every mapping-valued property, one candidate each
6. the mapping itself

Anything that is not a list or mapping is unrecognized.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from meeting_tasks.errors import MalformedResponseError, NoTasksExtractedError

logger = logging.getLogger(__name__)


class EnvelopeKind(StrEnum):
    """How the candidates were found in the parsed response."""

    SEQUENCE = "sequence"
    SINGLE_MAPPING = "single_mapping"
    UNRECOGNIZED = "unrecognized"


@dataclass
class Envelope:
    """Result of envelope classification."""

    kind: EnvelopeKind
    candidates: list[Any] = field(default_factory=list)


def _has_description(value: dict[str, Any]) -> bool:
    description = value.get("description")
    return isinstance(description, str) and bool(description.strip())


def classify_envelope(value: Any) -> Envelope:
    """Classify a parsed JSON value and collect its task candidates."""
    if isinstance(value, list):
        return Envelope(EnvelopeKind.SEQUENCE, list(value))

    if not isinstance(value, dict):
        return Envelope(EnvelopeKind.UNRECOGNIZED)

    tasks = value.get("tasks")
    if isinstance(tasks, list):
        return Envelope(EnvelopeKind.SEQUENCE, list(tasks))

    if _has_description(value):
        return Envelope(EnvelopeKind.SINGLE_MAPPING, [value])

    list_values = [v for v in value.values() if isinstance(v, list)]
    if list_values:
        return Envelope(EnvelopeKind.SEQUENCE, [item for items in list_values for item in items])

    mapping_values = [v for v in value.values() if isinstance(v, dict)]
    if mapping_values:
        return Envelope(EnvelopeKind.SEQUENCE, mapping_values)

    return Envelope(EnvelopeKind.SINGLE_MAPPING, [value])


def parse_response(raw: str) -> list[Any]:
    """Parse the model's raw text into a list of task candidates.

    Raises:
        MalformedResponseError: *raw* is not valid JSON.
        NoTasksExtractedError: No candidate could be located.
    """
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse JSON response: %s", raw)
        raise MalformedResponseError("Invalid JSON response from AI") from exc

    envelope = classify_envelope(value)
    logger.debug("Response envelope %s with %d candidate(s)", envelope.kind, len(envelope.candidates))

    if not envelope.candidates:
        raise NoTasksExtractedError("No valid tasks could be extracted from the conversation")

    return envelope.candidates
