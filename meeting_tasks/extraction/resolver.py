"""Derive canonical task fields from loosely-shaped model candidates."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, TypeVar

from dateutil import parser as date_parser

from meeting_tasks.errors import NoTasksExtractedError
from meeting_tasks.extraction.models import DEFAULT_PRIORITY, ParsedTask, Priority

logger = logging.getLogger(__name__)

T = TypeVar("T")

DESCRIPTION_KEYS = ("description", "task", "action", "item", "todo")
ASSIGNEE_KEYS = ("assignee", "assignedTo", "owner")
DUE_DATE_KEYS = ("dueDate", "due_date", "due", "date", "deadline")
PRIORITY_KEYS = ("priority", "importance", "severity")

MAX_DESCRIPTION_LENGTH = 500
ELLIPSIS = "..."

# Two word scales the model tends to use. They disagree on what "high" means
# relative to the prompt's P2=High, and are consulted in this order.
PRIORITY_WORD_SCALES: tuple[dict[str, Priority], ...] = (
    {"HIGH": Priority.P1, "MEDIUM": Priority.P2, "LOW": Priority.P4},
    {"URGENT": Priority.P1, "IMPORTANT": Priority.P2, "NORMAL": Priority.P3, "LOW": Priority.P4},
)

_ENUMERATION_RE = re.compile(r"^\d+[.)](?:\s+|$)")
_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))
# Names must be capitalized; only the connector is case-insensitive.
_ASSIGNEE_PREFIX_RE = re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\s+(?i:to|will)\s+")


def first_match(
    candidate: Mapping[str, Any],
    keys: Sequence[str],
    convert: Callable[[Any], T | None],
) -> T | None:
    """Return the first non-None ``convert(candidate[key])`` over *keys*, in order."""
    for key in keys:
        if key not in candidate:
            continue
        result = convert(candidate[key])
        if result is not None:
            return result
    return None


# ---------------------------------------------------------------------------
# Field converters
# ---------------------------------------------------------------------------


def non_blank_string(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def to_iso_datetime(value: Any) -> str | None:
    """Parse a date-ish string and format it as UTC ISO-8601 with milliseconds.

    The value must name a year, month and day. Values without an offset are
    taken as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        # dateutil fills missing parts from ``default``; two different defaults
        # expose values without an explicit year, month and day.
        parsed = date_parser.parse(value, default=_DATE_DEFAULTS[0])
        if parsed != date_parser.parse(value, default=_DATE_DEFAULTS[1]):
            logger.debug("Incomplete date, skipping: %r", value)
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        else:
            parsed = parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        logger.debug("Invalid date format, skipping: %r", value)
        return None

    return parsed.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_priority(value: Any) -> Priority | None:
    if not value:
        return None
    key = str(value).strip().upper()
    if key in Priority.__members__:
        return Priority(key)
    for scale in PRIORITY_WORD_SCALES:
        if key in scale:
            return scale[key]
    return None


# ---------------------------------------------------------------------------
# Description helpers
# ---------------------------------------------------------------------------


def strip_enumeration(description: str) -> str:
    """Remove a leading list marker such as ``1.`` or ``2)``."""
    return _ENUMERATION_RE.sub("", description, count=1)


def split_assignee_prefix(description: str) -> tuple[str, str]:
    """Split ``"Raj to follow up"`` into ``("Raj", "follow up")``.

    Returns ``("", description)`` when there is no name prefix or nothing
    would remain after removing it.
    """
    match = _ASSIGNEE_PREFIX_RE.match(description)
    if not match:
        return "", description
    remainder = description[match.end() :].strip()
    if not remainder:
        return "", description
    return match.group(1).strip(), remainder


def clamp_description(description: str) -> str:
    if len(description) <= MAX_DESCRIPTION_LENGTH:
        return description
    return description[: MAX_DESCRIPTION_LENGTH - len(ELLIPSIS)] + ELLIPSIS


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve_task(candidate: Any) -> ParsedTask | None:
    """Resolve one candidate into a ParsedTask, or None if it has no description."""
    if candidate is None:
        return None
    if isinstance(candidate, str):
        candidate = {"description": candidate}
    if not isinstance(candidate, dict):
        logger.warning("Task is not an object or string, skipping: %r", candidate)
        return None

    nested = candidate.get("task")
    if isinstance(nested, dict):
        candidate = nested

    description = first_match(candidate, DESCRIPTION_KEYS, non_blank_string)
    if description is not None:
        description = strip_enumeration(description)
    if not description:
        logger.warning("Task missing description, skipping: %r", candidate)
        return None

    assignee = first_match(candidate, ASSIGNEE_KEYS, non_blank_string)
    if assignee is None:
        assignee, description = split_assignee_prefix(description)

    return ParsedTask(
        description=clamp_description(description),
        assignee=assignee,
        due_date=first_match(candidate, DUE_DATE_KEYS, to_iso_datetime) or "",
        priority=first_match(candidate, PRIORITY_KEYS, to_priority) or DEFAULT_PRIORITY,
    )


def resolve_tasks(candidates: Sequence[Any]) -> list[ParsedTask]:
    """Resolve every candidate, in order, skipping the unrecoverable ones.

    Raises:
        NoTasksExtractedError: No candidate survived resolution.
    """
    tasks: list[ParsedTask] = []
    for index, candidate in enumerate(candidates):
        try:
            task = resolve_task(candidate)
        except Exception:
            logger.exception("Error processing task %d, skipping: %r", index, candidate)
            continue
        if task is not None:
            tasks.append(task)

    if not tasks:
        raise NoTasksExtractedError("No valid tasks could be extracted after processing")

    logger.info("Resolved %d of %d task candidate(s)", len(tasks), len(candidates))
    return tasks
