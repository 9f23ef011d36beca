"""Prompt construction for task extraction."""

from __future__ import annotations

from dataclasses import dataclass

from meeting_tasks.extraction.dates import DateContext

PROMPT_VERSION = "2"

TRUNCATION_MARKER = "... [truncated]"

SYSTEM_PROMPT_TEMPLATE = """\
Extract action items from meeting minutes into a JSON array of task objects with these fields:
- description: String (5-8 words, start with verb)
- assignee: String (name or empty)
- dueDate: String (ISO date or empty)
- priority: "P1"|"P2"|"P3"|"P4" (default: "P3")

PRIORITIES:
- P1: Urgent (today)
- P2: High (tomorrow)
- P3: Normal (this week)
- P4: Low (when possible)

RULES:
1. Extract ALL tasks, one per item in lists or action items
2. Keep descriptions concise and action-oriented
3. Extract assignees from "[Name] to [task]" or "[Name] will [task]"
4. Convert relative dates to ISO format (e.g., "tomorrow" -> date)
5. If unsure about priority, use P3

REFERENCE DATES:
- Today: {today}
- Tomorrow: {tomorrow}
- Next Friday: {next_friday}

RESPONSE FORMAT: {{ "tasks": [...] }}"""

USER_PROMPT_PREFIX = "Extract tasks from these meeting minutes. Be thorough but concise.\n\n"


@dataclass(frozen=True)
class PromptMessages:
    """System instruction and user payload for one extraction request."""

    system: str
    user: str

    def as_chat(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


def truncate_text(text: str, max_chars: int) -> str:
    """Keep the first *max_chars* characters and mark the cut.

    Action items past the cut are never seen by the model.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def build_system_prompt(date_context: DateContext) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(
        today=date_context.today,
        tomorrow=date_context.tomorrow,
        next_friday=date_context.next_friday,
    )


def build_messages(text: str, date_context: DateContext, max_chars: int) -> PromptMessages:
    """Assemble the system and user messages for *text*.

    Args:
        text: Raw meeting minutes.
        date_context: Anchors embedded in the system prompt.
        max_chars: Character budget for *text* before truncation.

    Returns:
        PromptMessages ready for the chat-completion call.
    """
    return PromptMessages(
        system=build_system_prompt(date_context),
        user=USER_PROMPT_PREFIX + truncate_text(text, max_chars),
    )
